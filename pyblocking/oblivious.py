"""
| Copyright (C) 2012 Philip Axer, Jonas Diemer
| TU Braunschweig, Germany
| All rights reserved.
| See LICENSE file for copyright and license details.

:Authors:
         - Jonas Diemer, Philip Axer

Description
-----------

Blocking analysis of suspension-based locking protocols
under suspension-oblivious (s-oblivious) analysis.

S-oblivious bounds do not depend on the priorities of the competing
tasks: any other task may be ahead of the analyzed one, only the number of
processors, the cluster assignment and (for k-exclusion) the number of
replicas limit the contention.
The OMLP variants with priority donation additionally charge one request
span of a local lower-priority task upon job arrival.
"""
from __future__ import absolute_import
from __future__ import print_function
from __future__ import unicode_literals
from __future__ import division

import logging

from . import analysis
from . import spinlocks
from . import util
from .analysis import Interference

logger = logging.getLogger("pyblocking")


def _global_bounds(info, limits):
    """ Blocking under global scheduling.
    limits(cs, issued) returns the (total, per source) request limits
    for issued requests to the resource with contention set cs.
    """
    resources = util.split_by_resource(info.get_tasks())

    results = analysis.BlockingBounds(info)

    for i, tsk in enumerate(info.get_tasks()):
        bterm = Interference()
        for req in tsk.requests:
            cs = resources[req.resource_id]

            total_limit, per_src_limit = limits(cs, req.num_requests)
            blocking = analysis.bound_blocking(cs, tsk.response, total_limit,
                                               per_src_limit, tsk)
            bterm += blocking

            if req.num_requests == 0:
                continue

            if req.num_requests != 1:
                total_limit, per_src_limit = limits(cs, 1)
                blocking = analysis.bound_blocking(cs, tsk.response,
                                                   total_limit,
                                                   per_src_limit, tsk)
            results.raise_request_span(i, analysis.with_own_request(blocking, req))

        results[i] = bterm

    return results


class GlobalOMLP(analysis.LockingProtocol):
    """ Global O(m) Locking Protocol.
    Each request is blocked by at most 2m - 1 requests,
    at most two of which stem from the same task.
    """

    def __init__(self, num_procs):
        analysis.LockingProtocol.__init__(self)
        assert num_procs >= 1, 'num_procs must be at least one'
        # # number of processors
        self.num_procs = num_procs

    def limits(self, cs, issued):
        return (2 * self.num_procs - 1) * issued, 2 * issued

    def blocking_bounds(self, info):
        return _global_bounds(info, self.limits)


class GlobalFMLP(analysis.LockingProtocol):
    """ Global FIFO Multiprocessor Locking Protocol.
    Each request waits for at most one request of each other task.
    """

    def limits(self, cs, issued):
        num_sources = len(set(req.task for req in cs))
        return (num_sources - 1) * issued, issued

    def blocking_bounds(self, info):
        return _global_bounds(info, self.limits)


class ClusteredOMLP(analysis.LockingProtocol):
    """ Clustered OMLP with priority donation.
    The direct blocking equals the one of task-fair mutex spin locks,
    since with priority donation at most one job per processor
    has an incomplete request.
    """

    def __init__(self, procs_per_cluster, dedicated_irq=None):
        analysis.LockingProtocol.__init__(self)
        self.procs_per_cluster = procs_per_cluster
        self.dedicated_irq = analysis.resolve_dedicated_irq(dedicated_irq)

    def blocking_bounds(self, info):
        results = spinlocks.np_fifo_bounds(info, self.procs_per_cluster,
                                           self.dedicated_irq)
        # This is the initial delay due to priority donation.
        analysis.charge_arrival_blocking(info, results)
        return results


class ClusteredRWOMLP(analysis.LockingProtocol):
    """ Clustered OMLP for phase-fair reader/writer locks """

    def __init__(self, procs_per_cluster, dedicated_irq=None):
        analysis.LockingProtocol.__init__(self)
        self.procs_per_cluster = procs_per_cluster
        self.dedicated_irq = analysis.resolve_dedicated_irq(dedicated_irq)

    def blocking_bounds(self, info):
        results = spinlocks.phase_fair_bounds(info, self.procs_per_cluster,
                                              self.dedicated_irq)
        analysis.charge_arrival_blocking(info, results)
        return results


def kx_blocking(tsk, cluster_resources, parallelism, res_id, issued, replicas):
    """ Blocking of issued requests to a resource with the given number of
    replicas. Requests are served in FIFO order by the first free replica,
    hence waiting for n requests ahead takes at most as long as the
    ceil(n / replicas) longest of them.
    """
    remaining = issued * util.divide_with_ceil(sum(parallelism), replicas)
    per_cluster = [issued * p for p in parallelism]
    clusters = [idx for idx, p in enumerate(parallelism) if p > 0]

    inf = Interference()
    for req in util.merge_contention(cluster_resources, res_id, clusters):
        if remaining <= 0:
            break
        if req.task is tsk:
            continue
        c = req.task.cluster
        num = min(req.get_max_num_requests(tsk.response), issued,
                  per_cluster[c], remaining)
        if num <= 0:
            continue
        inf += Interference(num, num * req.request_length)
        per_cluster[c] -= num
        remaining -= num

    return inf


class ClusteredKXOMLP(analysis.LockingProtocol):
    """ Clustered OMLP for k-exclusion locks """

    def __init__(self, replica_info, procs_per_cluster, dedicated_irq=None):
        analysis.LockingProtocol.__init__(self)
        assert replica_info is not None, 'k-exclusion requires replica information'
        # # model.ReplicaInfo
        self.replica_info = replica_info
        self.procs_per_cluster = procs_per_cluster
        self.dedicated_irq = analysis.resolve_dedicated_irq(dedicated_irq)

    def blocking_bounds(self, info):
        cluster_resources = util.split_by_cluster_and_resource(info.get_tasks())

        results = analysis.BlockingBounds(info)

        for i, tsk in enumerate(info.get_tasks()):
            parallelism = analysis.cluster_parallelism(
                tsk, len(cluster_resources), self.procs_per_cluster,
                self.dedicated_irq)
            bterm = Interference()
            for req in tsk.requests:
                k = self.replica_info[req.resource_id]
                blocking = kx_blocking(tsk, cluster_resources, parallelism,
                                       req.resource_id, req.num_requests, k)
                bterm += blocking

                if req.num_requests == 0:
                    continue

                if req.num_requests != 1:
                    blocking = kx_blocking(tsk, cluster_resources, parallelism,
                                           req.resource_id, 1, k)
                results.raise_request_span(i, analysis.with_own_request(blocking, req))

            results[i] = bterm

        analysis.charge_arrival_blocking(info, results)
        return results


class PartitionedOMLP(analysis.LockingProtocol):
    """ Partitioned OMLP (each cluster is a single processor).

    A job first obtains its processor's contention token, which may be
    held by one local lower-priority job for the duration of its request
    span, and then waits in a FIFO queue containing at most one request
    per other processor.
    """

    def blocking_bounds(self, info):
        tasks = info.get_tasks()
        cluster_resources = util.split_by_cluster_and_resource(tasks)

        results = analysis.BlockingBounds(info)
        remote = list()

        # We need for each task the maximum request span. We also need the
        # maximum direct blocking from remote partitions for each request.
        # We can determine both in one pass.
        for i, tsk in enumerate(tasks):
            rterm = Interference()
            for req in tsk.requests:
                blocking = analysis.np_fifo_per_resource(
                    tsk, cluster_resources, 1, req.resource_id,
                    req.num_requests)
                rterm += blocking

                if req.num_requests == 0:
                    continue

                if req.num_requests != 1:
                    blocking = analysis.np_fifo_per_resource(
                        tsk, cluster_resources, 1, req.resource_id, 1)
                results.raise_request_span(i, analysis.with_own_request(blocking, req))
            remote.append(rterm)

        for i, tsk in enumerate(tasks):
            span = analysis.max_local_request_span(tsk, tasks, results)
            local = span * tsk.get_total_num_requests()

            results[i] = remote[i] + local
            results.set_remote_blocking(i, remote[i])
            results.set_local_blocking(i, local)

        return results


def global_omlp_bounds(info, num_procs):
    return analysis.analyze(info, GlobalOMLP(num_procs))


def global_fmlp_bounds(info):
    return analysis.analyze(info, GlobalFMLP())


def clustered_omlp_bounds(info, procs_per_cluster, dedicated_irq=None):
    return analysis.analyze(info, ClusteredOMLP(procs_per_cluster, dedicated_irq))


def clustered_rw_omlp_bounds(info, procs_per_cluster, dedicated_irq=None):
    return analysis.analyze(info, ClusteredRWOMLP(procs_per_cluster, dedicated_irq))


def clustered_kx_omlp_bounds(info, replica_info, procs_per_cluster,
                             dedicated_irq=None):
    return analysis.analyze(info, ClusteredKXOMLP(replica_info,
                                                  procs_per_cluster,
                                                  dedicated_irq))


def part_omlp_bounds(info):
    return analysis.analyze(info, PartitionedOMLP())
