"""
| Copyright (C) 2011, 2012 Philip Axer
| TU Braunschweig, Germany
| All rights reserved.
| See LICENSE file for copyright and license details.

:Authors:
         - Philip Axer
         - Jonas Diemer

Description
-----------

Various utility functions.
Most of them reorganize the requests of a task set into contention sets,
i.e. lists of RequestBound that compete for the same resource.
"""

from __future__ import absolute_import
from __future__ import print_function
from __future__ import unicode_literals
from __future__ import division

import logging
import math
import numbers
from collections import defaultdict

logger = logging.getLogger("pyblocking")


def divide_with_ceil(a, b):
    """ Returns ceil(a / b) without float rounding for integral arguments """
    assert b > 0
    if isinstance(a, numbers.Integral) and isinstance(b, numbers.Integral):
        return -(-a // b)
    return int(math.ceil(a / b))


def by_request_length(req):
    """ sort key: longest request first """
    return -req.request_length


def sort_by_request_length(contention_set):
    """ Sorts a list of requests in place, longest first """
    contention_set.sort(key=by_request_length)
    return contention_set


def split_by_cluster(tasks):
    """ Returns a list of clusters, each a list of the tasks assigned to it.
    The list is indexed by cluster id; unused ids yield empty clusters.
    """
    clusters = list()
    for t in tasks:
        while t.cluster >= len(clusters):
            clusters.append(list())
        clusters[t.cluster].append(t)
    return clusters


def split_by_resource(tasks):
    """ Returns a dict mapping resource ids to the list of all requests
    the tasks issue to that resource, longest first.
    """
    resources = defaultdict(list)
    for t in tasks:
        for req in t.requests:
            resources[req.resource_id].append(req)
    for cs in resources.values():
        sort_by_request_length(cs)
    return resources


def split_by_cluster_and_resource(tasks):
    """ Returns a list indexed by cluster id, each element maps resource ids
    to the requests of that cluster's tasks, longest first.
    """
    return [split_by_resource(c) for c in split_by_cluster(tasks)]


def split_by_type(contention_set):
    """ Splits a list of requests into (reads, writes), keeping the order """
    reads = [req for req in contention_set if req.is_read()]
    writes = [req for req in contention_set if req.is_write()]
    return reads, writes


def split_cluster_resources_by_type(cluster_resources):
    """ Applies split_by_type() to the output of
    split_by_cluster_and_resource().
    Returns (reads, writes) in the same shape.
    """
    reads = list()
    writes = list()
    for resources in cluster_resources:
        r = defaultdict(list)
        w = defaultdict(list)
        for res_id, cs in resources.items():
            r[res_id], w[res_id] = split_by_type(cs)
        reads.append(r)
        writes.append(w)
    return reads, writes


def merge_contention(cluster_resources, res_id, clusters=None):
    """ Returns all requests for res_id of the given clusters
    (default: all) as a single list, longest first """
    if clusters is None:
        clusters = range(len(cluster_resources))
    merged = list()
    for c in clusters:
        merged.extend(cluster_resources[c].get(res_id, []))
    return sort_by_request_length(merged)


# vim: tabstop=4 expandtab shiftwidth=4 softtabstop=4
