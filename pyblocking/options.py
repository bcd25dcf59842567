"""
| Copyright (C) 2007-2012 Jonas Diemer, Philip Axer
| TU Braunschweig, Germany
| All rights reserved.
| See LICENSE file for copyright and license details.

:Authors:
         - Jonas Diemer
         - Philip Axer

Description
-----------

This module contains methods to initalize the pyblocking environment.
It will setup an argument parser and set up default parameters.
"""

from __future__ import print_function

import argparse
import logging
import sys

from pyblocking import __license_text__

# sentinel processor id: no processor assigned / no dedicated interrupt CPU
NO_CPU = -1
INFINITY = float('inf')

parser = argparse.ArgumentParser(description='Blocking Analysis')
parser.add_argument('--dedicated_irq', type=int,
                    default=NO_CPU,
                    help='Processor reserved for interrupt handling, '
                    'used if an analysis is invoked without one '
                    '(default=%d, i.e. none)' % (NO_CPU))
parser.add_argument('--check_bounds', action='store_true',
                    help='verify the invariants of every computed blocking bound')
parser.add_argument('--verbose', '-v', action='store_true',
                    help='be more talkative')


welcome = "pyBlocking a Multiprocessor Locking Analysis Toolkit implemented in Python.\n\n" \
+ __license_text__

_opts = None
_opts_dict = None

logger = logging.getLogger("pyblocking")


def get_opt(option):
    """ Returns the option specified by the parameter.
    If called for the first time, the parsing is done.
    """
    global _opts
    if _opts is None: init_pyblocking(implicit=True)
    return getattr(_opts, option)

def set_opt(option, value):
    """ Sets the option specified by the parameter to value.
    If called for the first time, the parsing is done.
    """
    global _opts
    if _opts is None: init_pyblocking(implicit=True)
    setattr(_opts, option, value)

def reset():
    """ Forget all parsed options, the next get_opt() re-initializes """
    global _opts, _opts_dict
    _opts = None
    _opts_dict = None

def pprintTable(out, table, column_sperator="", header_separator=":"):
    """Prints out a table of data, padded for alignment
    @param out: Output stream (file-like object)
    @param table: The table to print. A list of lists.
    Each row must have the same number of columns. """

    def get_max_width(table1, index1):
        """Get the maximum width of the given column index"""
        return max([len(str(row1[index1])) for row1 in table1])

    col_paddings = []
    for i in range(len(table[0])):
        col_paddings.append(get_max_width(table, i))

    for row in table:
        # left col
        print(row[0].ljust(col_paddings[0] + 1), end=header_separator, file=out)
        # rest of the cols
        for i in range(1, len(row)):
            col = str(row[i]).rjust(col_paddings[i] + 1)
            print(col, end=" " + column_sperator, file=out)
        print(file=out)

def init_pyblocking(implicit=False, args=None):
    """ Initialize pyblocking.
    This function parses the options and prints them for reference.
    It is called once automatically from get_opt() or set_opt()
    during the beginning of the analysis.
    It can also be called directly to control when initialization happens
    in order to modify options afterwards.
    """
    global _opts, _opts_dict
    _opts_dict = dict()
    if not implicit:
        # in this case we are explicitly initialized,
        # output welcome and consume cmdline parameters
        print(welcome)
        print("invoked via: " + " ".join(sys.argv) + "\n")

        _opts = parser.parse_args(args)
    else:
        # implicit init, through regression test or non-pyblocking script
        # distill defaults from the parser and pretend nothing happend
        _opts = argparse.Namespace()
        for action in parser._actions:
            if action.default == argparse.SUPPRESS:
                continue
            setattr(_opts, action.dest, action.default)

    # table of selected paramters
    table = list()
    for attr in dir(_opts):
        if not attr.startswith("_"):
            row = ["%s" % attr, str(getattr(_opts, attr))]
            _opts_dict[attr] = str(getattr(_opts, attr))
            table.append(row)
    if not implicit:
        pprintTable(sys.stdout, table)
        print("\n\n")

    # set up the general logging object
    if _opts.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s: %(message)s")
    else:
        logging.basicConfig(level=logging.WARNING, format="%(levelname)s: %(message)s")

    if implicit:
        logger.debug("implicitly invoked pyblocking")
