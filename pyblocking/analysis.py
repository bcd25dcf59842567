""" Generic Blocking Analysis Algorithms

| Copyright (C) 2007-2012 Jonas Diemer, Philip Axer
| TU Braunschweig, Germany
| All rights reserved.
| See LICENSE file for copyright and license details.

:Authors:
         - Jonas Diemer
         - Philip Axer
         - Johannes Schlatow

Description
-----------

This module contains the result containers of the blocking analysis
and the counting primitives shared by all locking protocols.
It should be imported in scripts that do the analysis.

Each locking protocol is a LockingProtocol. Its blocking_bounds() method
maps a model.ResourceSharingInfo to a freshly allocated BlockingBounds
with one entry per task (in task insertion order).
"""

from __future__ import absolute_import
from __future__ import print_function
from __future__ import unicode_literals
from __future__ import division

import collections
import functools
import logging

from . import model
from . import options

logger = logging.getLogger("pyblocking")

NO_CPU = options.NO_CPU

# returned if a bound does not converge
UNLIMITED = options.INFINITY

# priority orderings, foo(a, b) == True means "a" is more important than "b"
prio_low_wins_equal_fifo = lambda a, b : a <= b
prio_low_wins_equal_domination = lambda a, b : a < b


class BoundsViolation(Exception):
    """ Thrown if a computed bound violates its invariants """
    def __init__(self, value):
        super(BoundsViolation, self).__init__()
        self.value = value

    def __str__(self):
        return repr(self.value)


@functools.total_ordering
class Interference(object):
    """ A number of interfering requests and their cumulative length """

    __slots__ = ('count', 'total_length')

    def __init__(self, count=0, total_length=0):
        self.count = count
        self.total_length = total_length

    def __add__(self, other):
        return Interference(self.count + other.count,
                            self.total_length + other.total_length)

    def __mul__(self, n):
        """ n times the same interference """
        return Interference(n * self.count, n * self.total_length)

    __rmul__ = __mul__

    def __eq__(self, other):
        if not isinstance(other, Interference):
            return NotImplemented
        return (self.total_length, self.count) == \
            (other.total_length, other.count)

    def __lt__(self, other):
        if not isinstance(other, Interference):
            return NotImplemented
        return self.total_length < other.total_length or \
            (self.total_length == other.total_length and self.count < other.count)

    def __hash__(self):
        return hash((self.count, self.total_length))

    def __repr__(self):
        return "Interference(count=%s, total_length=%s)" % \
            (self.count, self.total_length)


class BlockingBounds(object):
    """ This class stores the analysis results for all tasks of a task set.

    For each task there are five interference figures:
    the raw blocking term, the longest request span,
    the blocking incurred at job arrival and the blocking split into
    remote and local parts.
    """

    def __init__(self, info):
        """ CTOR
        info is either the number of tasks (only the blocking and request
        span terms are available) or a ResourceSharingInfo.
        """
        if isinstance(info, model.ResourceSharingInfo):
            num_tasks = len(info)
            self.arrival = [Interference() for _ in range(num_tasks)]
            self.remote = [Interference() for _ in range(num_tasks)]
            self.local = [Interference() for _ in range(num_tasks)]
        else:
            num_tasks = info
            self.arrival = None
            self.remote = None
            self.local = None

        # # raw blocking term
        self.blocking = [Interference() for _ in range(num_tasks)]

        # # longest single request span
        self.request_span = [Interference() for _ in range(num_tasks)]

    def _check(self, category, idx):
        assert category is not None, \
            'interference category not allocated for this result'
        assert 0 <= idx < len(category), 'task index %d out of range' % idx

    def __len__(self):
        return len(self.blocking)

    def size(self):
        return len(self.blocking)

    def __getitem__(self, idx):
        self._check(self.blocking, idx)
        return self.blocking[idx]

    def __setitem__(self, idx, inf):
        self._check(self.blocking, idx)
        self.blocking[idx] = inf

    def raise_request_span(self, idx, inf):
        self._check(self.request_span, idx)
        self.request_span[idx] = max(self.request_span[idx], inf)

    def get_max_request_span(self, idx):
        self._check(self.request_span, idx)
        return self.request_span[idx]

    def get_blocking_term(self, idx):
        return self[idx].total_length

    def get_blocking_count(self, idx):
        return self[idx].count

    def get_span_term(self, idx):
        return self.get_max_request_span(idx).total_length

    def get_span_count(self, idx):
        return self.get_max_request_span(idx).count

    def get_remote_blocking(self, idx):
        self._check(self.remote, idx)
        return self.remote[idx].total_length

    def get_remote_count(self, idx):
        self._check(self.remote, idx)
        return self.remote[idx].count

    def set_remote_blocking(self, idx, inf):
        self._check(self.remote, idx)
        self.remote[idx] = inf

    def get_local_blocking(self, idx):
        self._check(self.local, idx)
        return self.local[idx].total_length

    def get_local_count(self, idx):
        self._check(self.local, idx)
        return self.local[idx].count

    def set_local_blocking(self, idx, inf):
        self._check(self.local, idx)
        self.local[idx] = inf

    def get_arrival_blocking(self, idx):
        self._check(self.arrival, idx)
        return self.arrival[idx].total_length

    def get_arrival_count(self, idx):
        self._check(self.arrival, idx)
        return self.arrival[idx].count

    def set_arrival_blocking(self, idx, inf):
        self._check(self.arrival, idx)
        self.arrival[idx] = inf

    def categories(self, idx):
        """ Returns a dict with all allocated interference figures of task idx """
        d = collections.OrderedDict()
        for name in ('blocking', 'request_span', 'arrival', 'remote', 'local'):
            category = getattr(self, name)
            if category is not None:
                self._check(category, idx)
                d[name] = category[idx]
        return d

    def __eq__(self, other):
        if not isinstance(other, BlockingBounds):
            return NotImplemented
        return all(getattr(self, name) == getattr(other, name) for name in
                   ('blocking', 'request_span', 'arrival', 'remote', 'local'))

    def __ne__(self, other):
        return not self == other

    __hash__ = None


def check_bounds(bounds):
    """ Checks the invariants of a BlockingBounds:
    all figures are non-negative and a zero count implies a zero length.
    Raises BoundsViolation otherwise.
    """
    for i in range(len(bounds)):
        for name, inf in bounds.categories(i).items():
            if inf.count < 0 or inf.total_length < 0:
                raise BoundsViolation("negative %s for task %d: %s" % (name, i, inf))
            if inf.count == 0 and inf.total_length != 0:
                raise BoundsViolation("%s of task %d has length without requests: %s"
                                      % (name, i, inf))
    return True


class LockingProtocol(object):
    """ Base class of all locking protocol analyses """

    def __init__(self):
        # # descriptive name of the protocol
        self.name = self.__class__.__name__

    def __repr__(self):
        return self.name

    def blocking_bounds(self, info):
        """ Returns a BlockingBounds for all tasks in info.
        Has to be implemented by the protocol.
        """
        raise NotImplementedError


def analyze(info, protocol):
    """ Analyze the task set info under the given locking protocol.
    Returns a BlockingBounds with one entry per task.
    """
    assert isinstance(info, model.ResourceSharingInfo)
    assert isinstance(protocol, LockingProtocol)

    logger.debug("analyzing %d tasks under %s" % (len(info), protocol))
    bounds = protocol.blocking_bounds(info)
    assert len(bounds) == len(info)

    if options.get_opt('check_bounds'):
        check_bounds(bounds)

    for i in range(len(bounds)):
        logger.debug("task %d: blocking %s" % (i, bounds[i]))

    return bounds


def resolve_dedicated_irq(dedicated_irq):
    """ Returns the configured interrupt processor if dedicated_irq is None """
    if dedicated_irq is None:
        return options.get_opt('dedicated_irq')
    return dedicated_irq


### counting primitives

ClusterLimit = collections.namedtuple('ClusterLimit',
                                      ['max_total_requests',
                                       'max_requests_per_source'])


def bound_blocking(contention_set, interval, max_total_requests,
                   max_requests_per_source, exclude_task=None,
                   may_block=None):
    """ Sums up the longest requests of contention_set.

    contention_set must be sorted by request length (longest first).
    At most max_total_requests are counted in total and at most
    max_requests_per_source per request bound, which is further limited by
    the number of requests its task can issue during interval.
    Requests of exclude_task are skipped, as are requests for which the
    optional predicate may_block(req) is False.
    """
    inf = Interference()
    remaining = max_total_requests

    for req in contention_set:
        if remaining <= 0:
            break
        if req.task is exclude_task:
            continue
        if may_block is not None and not may_block(req):
            continue
        num = min(req.get_max_num_requests(interval),
                  max_requests_per_source, remaining)
        inf += Interference(num, num * req.request_length)
        remaining -= num

    return inf


def bound_blocking_all_clusters(cluster_resources, limits, res_id, interval,
                                exclude_task=None):
    """ Adds up bound_blocking() for res_id over all clusters,
    each with its own ClusterLimit """
    inf = Interference()
    for resources, limit in zip(cluster_resources, limits):
        cs = resources.get(res_id)
        if cs:
            inf += bound_blocking(cs, interval,
                                  limit.max_total_requests,
                                  limit.max_requests_per_source,
                                  exclude_task)
    return inf


def irq_cluster(procs_per_cluster, dedicated_irq):
    """ Returns the cluster hosting the dedicated interrupt processor """
    if dedicated_irq is None or dedicated_irq == NO_CPU:
        return None
    return dedicated_irq // procs_per_cluster


def cluster_parallelism(task, num_clusters, procs_per_cluster, dedicated_irq):
    """ Returns for each cluster the number of processors on which
    requests can be pending while task waits. The task's own processor and
    the dedicated interrupt processor do not count.
    """
    assert procs_per_cluster >= 1, 'procs_per_cluster must be at least one'
    irq = irq_cluster(procs_per_cluster, dedicated_irq)
    parallelism = list()
    for idx in range(num_clusters):
        p = procs_per_cluster
        if idx == irq:
            p -= 1
        if p and task.cluster == idx:
            p -= 1
        parallelism.append(p)
    return parallelism


def np_fifo_limits(task, num_clusters, procs_per_cluster, issued,
                   dedicated_irq=NO_CPU):
    """ Limits for non-preemptive FIFO queueing: per issued request, at most
    one blocking request per remote processor of each cluster """
    return [ClusterLimit(issued * p, issued) for p in
            cluster_parallelism(task, num_clusters, procs_per_cluster,
                                dedicated_irq)]


def np_fifo_per_resource(task, cluster_resources, procs_per_cluster,
                         res_id, issued, dedicated_irq=NO_CPU):
    limits = np_fifo_limits(task, len(cluster_resources), procs_per_cluster,
                            issued, dedicated_irq)
    return bound_blocking_all_clusters(cluster_resources, limits, res_id,
                                       task.response, task)


def with_own_request(inf, req):
    """ A request span includes the request itself """
    return inf + Interference(1, req.request_length)


def max_local_request_span(task, tasks, bounds,
                           priority_cmp=prio_low_wins_equal_domination):
    """ Longest request span of any other task in the same cluster
    that does not have a higher priority than task """
    span = Interference()
    for i, t in enumerate(tasks):
        if t is task or t.cluster != task.cluster:
            continue
        if not priority_cmp(t.priority, task.priority):
            span = max(span, bounds.get_max_request_span(i))
    return span


def charge_arrival_blocking(info, bounds, charge_total=True,
                            priority_cmp=prio_low_wins_equal_domination):
    """ Upon release, a job may have to wait for one request span of a
    local lower-priority task (priority donation, non-preemptive sections).
    The span is recorded as arrival blocking and, if charge_total is set,
    added to the raw blocking term.
    """
    tasks = info.get_tasks()
    for i, t in enumerate(tasks):
        inf = max_local_request_span(t, tasks, bounds, priority_cmp)
        if charge_total:
            bounds[i] += inf
        bounds.set_arrival_blocking(i, inf)
