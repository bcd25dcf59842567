"""
| Copyright (C) 2012 Philip Axer, Jonas Diemer
| TU Braunschweig, Germany
| All rights reserved.
| See LICENSE file for copyright and license details.

:Authors:
         - Jonas Diemer, Philip Axer

Description
-----------

Blocking analysis of spin locks (busy waiting).

Jobs spin non-preemptively, hence while a job waits for a resource
at most one request per other processor can be ahead of it.
A task-fair lock serves requests in FIFO order,
a phase-fair reader/writer lock alternates between read and write phases.
"""
from __future__ import absolute_import
from __future__ import print_function
from __future__ import unicode_literals
from __future__ import division

import logging

from . import analysis
from . import util
from .analysis import Interference

logger = logging.getLogger("pyblocking")


def np_fifo_bounds(info, procs_per_cluster, dedicated_irq):
    """ Direct blocking and request spans under non-preemptive
    FIFO queueing of all requests.
    Does not charge arrival blocking.
    """
    cluster_resources = util.split_by_cluster_and_resource(info.get_tasks())

    results = analysis.BlockingBounds(info)

    for i, tsk in enumerate(info.get_tasks()):
        bterm = Interference()
        for req in tsk.requests:
            blocking = analysis.np_fifo_per_resource(
                tsk, cluster_resources, procs_per_cluster,
                req.resource_id, req.num_requests, dedicated_irq)

            bterm += blocking

            if req.num_requests == 0:
                continue

            # the span only covers a single request
            if req.num_requests != 1:
                blocking = analysis.np_fifo_per_resource(
                    tsk, cluster_resources, procs_per_cluster,
                    req.resource_id, 1, dedicated_irq)

            results.raise_request_span(i, analysis.with_own_request(blocking, req))

        results[i] = bterm
        logger.debug("task %d: np-fifo blocking %s" % (i, bterm))

    return results


def _competing_clusters(tsk, num_clusters, procs_per_cluster, dedicated_irq):
    """ clusters with at least one processor that can hold a request
    while tsk waits """
    parallelism = analysis.cluster_parallelism(tsk, num_clusters,
                                               procs_per_cluster, dedicated_irq)
    return [idx for idx, p in enumerate(parallelism) if p > 0]


def _read_phases(tsk, reads, clusters, res_id, num_phases):
    """ Each read phase lasts at most as long as the longest read """
    cs = util.merge_contention(reads, res_id, clusters)
    return analysis.bound_blocking(cs, tsk.response, num_phases, num_phases, tsk)


def task_fair_read_blocking(tsk, reads, writes, procs_per_cluster, res_id,
                            issued, dedicated_irq):
    """ A read request in a task-fair queue waits for the writers ahead of
    it and for at most one read phase in front of each such writer """
    wblocking = analysis.np_fifo_per_resource(tsk, writes, procs_per_cluster,
                                              res_id, issued, dedicated_irq)
    clusters = _competing_clusters(tsk, len(reads), procs_per_cluster,
                                   dedicated_irq)
    return wblocking + _read_phases(tsk, reads, clusters, res_id,
                                    wblocking.count)


def phase_fair_blocking(tsk, req, reads, writes, procs_per_cluster, issued,
                        dedicated_irq):
    """ Blocking of issued requests like req under phase-fair queueing """
    clusters = _competing_clusters(tsk, len(reads), procs_per_cluster,
                                   dedicated_irq)
    if req.is_read():
        # readers wait for at most one writer
        cs = util.merge_contention(writes, req.resource_id, clusters)
        return analysis.bound_blocking(cs, tsk.response, issued, issued, tsk)

    wblocking = analysis.np_fifo_per_resource(tsk, writes, procs_per_cluster,
                                              req.resource_id, issued,
                                              dedicated_irq)
    # one read phase before each writer ahead, and one before ourselves
    return wblocking + _read_phases(tsk, reads, clusters, req.resource_id,
                                    wblocking.count + issued)


def phase_fair_bounds(info, procs_per_cluster, dedicated_irq):
    cluster_resources = util.split_by_cluster_and_resource(info.get_tasks())
    reads, writes = util.split_cluster_resources_by_type(cluster_resources)

    results = analysis.BlockingBounds(info)

    for i, tsk in enumerate(info.get_tasks()):
        bterm = Interference()
        for req in tsk.requests:
            blocking = phase_fair_blocking(tsk, req, reads, writes,
                                           procs_per_cluster,
                                           req.num_requests, dedicated_irq)
            bterm += blocking

            if req.num_requests == 0:
                continue

            if req.num_requests != 1:
                blocking = phase_fair_blocking(tsk, req, reads, writes,
                                               procs_per_cluster, 1,
                                               dedicated_irq)

            results.raise_request_span(i, analysis.with_own_request(blocking, req))

        results[i] = bterm

    return results


class TaskFairMutex(analysis.LockingProtocol):
    """ FIFO-ordered mutex spin lock """

    def __init__(self, procs_per_cluster, dedicated_irq=None):
        analysis.LockingProtocol.__init__(self)

        # # number of processors per cluster
        self.procs_per_cluster = procs_per_cluster

        # # processor reserved for interrupts (NO_CPU if none)
        self.dedicated_irq = analysis.resolve_dedicated_irq(dedicated_irq)

    def blocking_bounds(self, info):
        results = np_fifo_bounds(info, self.procs_per_cluster, self.dedicated_irq)
        # non-preemptive spinning delays local higher-priority arrivals,
        # but this is not spinning of the arriving job itself
        analysis.charge_arrival_blocking(info, results, charge_total=False)
        return results


class TaskFairRW(analysis.LockingProtocol):
    """ Task-fair (FIFO) reader/writer spin lock

    Write requests are bounded as mutex requests of info_mtx,
    a copy of the task set in which reads are treated as writes
    (derived from the analyzed task set if not given).
    Read requests use the smaller of the mutex bound and the
    reader/writer bound.
    """

    def __init__(self, procs_per_cluster, dedicated_irq=None, info_mtx=None):
        analysis.LockingProtocol.__init__(self)
        self.procs_per_cluster = procs_per_cluster
        self.dedicated_irq = analysis.resolve_dedicated_irq(dedicated_irq)
        self.info_mtx = info_mtx

    def _mutex_blocking(self, tsk_mtx, resources_mtx, res_id, issued):
        return analysis.np_fifo_per_resource(tsk_mtx, resources_mtx,
                                             self.procs_per_cluster, res_id,
                                             issued, self.dedicated_irq)

    def _read_blocking(self, tsk, reads, writes, res_id, issued):
        return task_fair_read_blocking(tsk, reads, writes,
                                       self.procs_per_cluster, res_id,
                                       issued, self.dedicated_irq)

    def blocking_bounds(self, info):
        info_mtx = self.info_mtx
        if info_mtx is None:
            info_mtx = info.as_mutex()
        assert len(info_mtx) == len(info), \
            'mutex task set must match the analyzed task set'

        cluster_resources = util.split_by_cluster_and_resource(info.get_tasks())
        resources_mtx = util.split_by_cluster_and_resource(info_mtx.get_tasks())
        reads, writes = util.split_cluster_resources_by_type(cluster_resources)

        results = analysis.BlockingBounds(info)

        for i, (tsk, tsk_mtx) in enumerate(zip(info.get_tasks(),
                                                info_mtx.get_tasks())):
            assert len(tsk.requests) == len(tsk_mtx.requests)
            bterm = Interference()
            for req, req_mtx in zip(tsk.requests, tsk_mtx.requests):
                res_id = req.resource_id
                n = req.num_requests

                blocking = self._mutex_blocking(tsk_mtx, resources_mtx, res_id, n)
                if n == 1:
                    blocking_1 = blocking
                else:
                    blocking_1 = self._mutex_blocking(tsk_mtx, resources_mtx,
                                                      res_id, 1)

                if req.is_read():
                    rw = self._read_blocking(tsk, reads, writes, res_id, n)
                    blocking = min(blocking, rw)
                    if n != 1:
                        rw = self._read_blocking(tsk, reads, writes, res_id, 1)
                    blocking_1 = min(blocking_1, rw)

                bterm += blocking

                if n == 0:
                    continue

                span = blocking_1 + Interference(
                    1, max(req.request_length, req_mtx.request_length))
                results.raise_request_span(i, span)

            results[i] = bterm

        analysis.charge_arrival_blocking(info, results, charge_total=False)
        return results


class PhaseFairRW(analysis.LockingProtocol):
    """ Phase-fair reader/writer spin lock """

    def __init__(self, procs_per_cluster, dedicated_irq=None):
        analysis.LockingProtocol.__init__(self)
        self.procs_per_cluster = procs_per_cluster
        self.dedicated_irq = analysis.resolve_dedicated_irq(dedicated_irq)

    def blocking_bounds(self, info):
        results = phase_fair_bounds(info, self.procs_per_cluster,
                                    self.dedicated_irq)
        analysis.charge_arrival_blocking(info, results, charge_total=False)
        return results


def task_fair_mutex_bounds(info, procs_per_cluster, dedicated_irq=None):
    return analysis.analyze(info, TaskFairMutex(procs_per_cluster, dedicated_irq))


def task_fair_rw_bounds(info, procs_per_cluster, dedicated_irq=None,
                        info_mtx=None):
    return analysis.analyze(info, TaskFairRW(procs_per_cluster, dedicated_irq,
                                             info_mtx))


def phase_fair_rw_bounds(info, procs_per_cluster, dedicated_irq=None):
    return analysis.analyze(info, PhaseFairRW(procs_per_cluster, dedicated_irq))
