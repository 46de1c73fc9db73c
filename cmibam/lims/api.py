"""Access sample metadata for an individual via a LIMS REST API.
"""
import collections
import json
import time

from six.moves import urllib

class SampleRecord(collections.namedtuple("SampleRecord",
                                          "name library sequencing is_tumor platform center "
                                          "date_sequenced files")):
    """Metadata for one sample of an individual, with its sequencing files.
    """
    def get_files(self, file_type):
        """Read files of a type as (file1, file2) groups; file2 is None for single end.
        """
        out = []
        for group in self.files.get(file_type, []):
            if isinstance(group, dict):
                group = [group.get("file1"), group.get("file2")]
            group = list(group) + [None]
            out.append((group[0], group[1] or None))
        return out

def _sample_from_details(details):
    return SampleRecord(name=details["name"],
                        library=details.get("library", ""),
                        sequencing=details.get("sequencing", ""),
                        is_tumor=bool(details.get("is_tumor", False)),
                        platform=details.get("platform", ""),
                        center=details.get("center", ""),
                        date_sequenced=details.get("date_sequenced"),
                        files=details.get("files", {}))

class LimsApiAccess:
    """Simple front end for accessing a LIMS REST API.
    """
    def __init__(self, base_url, api_key):
        self._base_url = base_url
        self._key = api_key
        self._max_tries = 5

    def _make_url(self, rel_url, params=None):
        if not params:
            params = dict()
        params['key'] = self._key
        vals = urllib.parse.urlencode(params)
        return ("%s%s" % (self._base_url, rel_url), vals)

    def _get(self, url, params=None):
        url, params = self._make_url(url, params)
        num_tries = 0
        while 1:
            response = urllib.request.urlopen("%s?%s" % (url, params))
            try:
                out = json.loads(response.read())
                break
            except ValueError:
                if num_tries > self._max_tries:
                    raise
                time.sleep(3)
                num_tries += 1
        return out

    def individual_samples(self, individual):
        """Retrieve the name and sample records for an individual.
        """
        try:
            details = self._get("/api/individuals/%s" % urllib.parse.quote(individual))
        except ValueError:
            raise ValueError("Could not find information in LIMS for individual: %s" % individual)
        if "error" in details:
            raise ValueError("Could not find information in LIMS for individual %s: %s"
                             % (individual, details["error"]))
        return (details.get("name", individual),
                [_sample_from_details(x) for x in details.get("samples", [])])
