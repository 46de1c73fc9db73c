"""Helpful utilities for building the processing graph.
"""
import os
import itertools
import time

import six


def safe_makedir(dname):
    """Make a directory if it doesn't exist, handling concurrent race conditions.
    """
    if not dname:
        return dname
    num_tries = 0
    max_tries = 5
    while not os.path.exists(dname):
        try:
            os.makedirs(dname)
        except OSError:
            if num_tries > max_tries:
                raise
            num_tries += 1
            time.sleep(2)
    return dname

# ## File names

def splitext_plus(f):
    """Split on file extensions, allowing for zipped extensions.
    """
    base, ext = os.path.splitext(f)
    if ext in [".gz", ".bz2", ".zip"]:
        base, ext2 = os.path.splitext(base)
        ext = ext2 + ext
    return base, ext

def swap_ext(to_transform, old_ext, new_ext):
    """Derive a file name by swapping a trailing extension.

    Strips `old_ext` from the end of the name if present, then appends
    `new_ext`. Works on a single name or a list of names:

    swap_ext("/path/to/S1.bam", ".bam", ".clean.bam") -> "/path/to/S1.clean.bam"
    swap_ext("S1.sam", ".bam", ".vcf") -> "S1.sam.vcf"
    """
    if is_sequence(to_transform):
        return [swap_ext(f, old_ext, new_ext) for f in to_transform]
    elif is_string(to_transform):
        if old_ext and to_transform.endswith(old_ext):
            to_transform = to_transform[:-len(old_ext)]
        return to_transform + new_ext
    else:
        raise ValueError("swap_ext takes a single filename as a string or "
                         "a list of filenames to transform.")

def file_plus_index(fname):
    """Convert a file name into the file plus required indexes.
    """
    exts = {".vcf": ".idx", ".vcf.gz": ".tbi", ".bed.gz": ".tbi"}
    ext = splitext_plus(fname)[-1]
    if ext in exts:
        return [fname, fname + exts[ext]]
    else:
        return [fname]

def bam_index(fname):
    """Index name for a BAM file, replacing the extension: S1.bam -> S1.bai
    """
    return swap_ext(fname, ".bam", ".bai")

# ## Functional programming

def partition(pred, iterable, tolist=False):
    'Use a predicate to partition entries into false entries and true entries'
    t1, t2 = itertools.tee(iterable)
    ifalse = six.moves.filterfalse(pred, t1)
    itrue = six.moves.filter(pred, t2)
    if tolist:
        return list(ifalse), list(itrue)
    else:
        return ifalse, itrue

def is_sequence(arg):
    """
    check if 'arg' is a sequence

    example: arg([]) -> True
    example: arg("lol") -> False
    """
    return (not is_string(arg) and
            (hasattr(arg, "__getitem__") or
             hasattr(arg, "__iter__")))

def is_string(arg):
    return isinstance(arg, six.string_types)
