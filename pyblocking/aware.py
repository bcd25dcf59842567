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
under suspension-aware (s-aware) analysis for partitioned
fixed-priority scheduling.

Priority is stored in TaskInfo.priority,
by default numerically lower numbers have a higher priority.
The bounds are split into remote blocking (waiting for requests
executed on other processors) and local blocking (requests executed
on the task's own processor), blocking = remote + local.
"""
from __future__ import absolute_import
from __future__ import print_function
from __future__ import unicode_literals
from __future__ import division

import logging

from . import analysis
from . import model
from . import util
from .analysis import Interference

logger = logging.getLogger("pyblocking")

UNLIMITED = analysis.UNLIMITED


class PartitionedFMLP(analysis.LockingProtocol):
    """ Partitioned FIFO Multiprocessor Locking Protocol.

    Global requests are served in FIFO order, resource holders are
    priority-boosted. Remote blocking: per request at most one request per
    other processor. Local blocking: each time a job arrives (release and
    after each request) boosted lower-priority requests may delay it,
    at most one if critical sections are non-preemptive and
    at most one per local lower-priority task if they are preemptive.
    """

    def __init__(self, preemptive=True,
                 priority_cmp=analysis.prio_low_wins_equal_domination):
        """
        :param preemptive: boosted critical sections can be preempted by other boosted critical sections
        :param priority_cmp: function to evaluate priority comparison of the form foo(a,b). if foo(a,b) == True, then "a" is more important than "b"
        """
        analysis.LockingProtocol.__init__(self)
        self.preemptive = preemptive
        self.priority_cmp = priority_cmp

    def _local_blocking(self, tsk, cluster):
        lower_tasks = [t for t in cluster if t is not tsk and
                       not self.priority_cmp(t.priority, tsk.priority)]
        lower = util.sort_by_request_length(
            [req for t in lower_tasks for req in t.requests])

        arrivals = tsk.get_num_arrivals()
        if self.preemptive:
            total = arrivals * len(lower_tasks)
        else:
            total = arrivals
        return analysis.bound_blocking(lower, tsk.response, total, arrivals)

    def blocking_bounds(self, info):
        tasks = info.get_tasks()
        clusters = util.split_by_cluster(tasks)
        cluster_resources = [util.split_by_resource(c) for c in clusters]

        results = analysis.BlockingBounds(info)

        for i, tsk in enumerate(tasks):
            remote = Interference()
            for req in tsk.requests:
                remote += analysis.np_fifo_per_resource(
                    tsk, cluster_resources, 1, req.resource_id,
                    req.num_requests)

            local = self._local_blocking(tsk, clusters[tsk.cluster])

            results[i] = remote + local
            results.set_remote_blocking(i, remote)
            results.set_local_blocking(i, local)

        return results


### MPCP

def priority_ceilings(resources, priority_cmp):
    """ Returns a dict mapping each resource id to the highest
    priority of all tasks accessing it """
    ceilings = dict()
    for res_id, cs in resources.items():
        ceiling = None
        for req in cs:
            prio = req.task.priority
            if ceiling is None or priority_cmp(prio, ceiling):
                ceiling = prio
        ceilings[res_id] = ceiling
    return ceilings


def max_gcs_length(tsk, ceilings, preempted_ceiling, priority_cmp):
    """ Longest global critical section of tsk that can preempt
    a global critical section executing at preempted_ceiling """
    gcs_length = 0
    for req in tsk.requests:
        if priority_cmp(ceilings[req.resource_id], preempted_ceiling):
            gcs_length = max(gcs_length, req.request_length)
    return gcs_length


def gcs_response_times(clusters, ceilings, priority_cmp):
    """ Returns a dict mapping each task to the list of response times
    of its global critical sections (in request order).
    A gcs can be preempted by one gcs with a higher ceiling of each
    other local task (since tasks are sequential).
    """
    times = dict()
    for cluster in clusters:
        for tsk in cluster:
            resp = list()
            for req in tsk.requests:
                prio = ceilings[req.resource_id]
                r = req.request_length
                for t in cluster:
                    if t is not tsk:
                        r += max_gcs_length(t, ceilings, prio, priority_cmp)
                resp.append(r)
            times[tsk] = resp
    return times


def gcs_interference(res_id, interval, tsk, times, multiple):
    """ Interference by the global critical sections tsk issues to res_id.
    If multiple is set, all jobs of tsk overlapping interval are counted,
    otherwise only the longest single gcs.
    """
    inf = Interference()
    for req, resp in zip(tsk.requests, times[tsk]):
        if req.resource_id != res_id or req.num_requests == 0:
            continue
        if multiple:
            num_jobs = util.divide_with_ceil(interval, tsk.period) + 1
            # Note: this may represent multiple gcs, so multiply.
            inf += Interference(1, resp) * (num_jobs * req.num_requests)
        else:
            inf = max(inf, Interference(1, resp))
    return inf


class MPCP(analysis.LockingProtocol):
    """ Multiprocessor Priority Ceiling Protocol.

    Global critical sections execute at the priority ceiling of their
    resource, waiting requests are served in priority order.
    """

    def __init__(self, use_virtual_spinning=False,
                 priority_cmp=analysis.prio_low_wins_equal_domination):
        """
        :param use_virtual_spinning: waiting jobs do not suspend but virtually spin, thus lower-priority jobs cannot issue requests meanwhile
        :param priority_cmp: function to evaluate priority comparison of the form foo(a,b). if foo(a,b) == True, then "a" is more important than "b"
        """
        analysis.LockingProtocol.__init__(self)
        self.use_virtual_spinning = use_virtual_spinning
        self.priority_cmp = priority_cmp

    def _remote_blocking_in(self, res_id, interval, tsk, clusters, times):
        blocking = Interference()
        for idx, cluster in enumerate(clusters):
            if idx == tsk.cluster:
                # local gcs are accounted for by local_blocking()
                continue
            max_lower = Interference()
            for t in cluster:
                if self.priority_cmp(t.priority, tsk.priority):
                    # This is a higher-priority task;
                    # it can block multiple times.
                    blocking += gcs_interference(res_id, interval, t, times, True)
                else:
                    # This is a lower-priority task;
                    # per processor only one of them can hold the resource.
                    max_lower = max(max_lower,
                                    gcs_interference(res_id, interval, t, times, False))
            blocking += max_lower
        return blocking

    def _request_blocking(self, res_id, tsk, clusters, times):
        """ Fixed point of the remote blocking of one request to res_id.
        Returns None if it exceeds the task's response time.
        """
        interval = 0
        blocking = self._remote_blocking_in(res_id, interval, tsk, clusters, times)
        while blocking.total_length != interval:
            interval = blocking.total_length
            # Bail out if it doesn't converge.
            if interval > tsk.response:
                return None
            blocking = self._remote_blocking_in(res_id, interval, tsk, clusters, times)
        return blocking

    def remote_blocking(self, tsk, clusters, times):
        remote = Interference()
        for req in tsk.requests:
            if req.num_requests == 0:
                continue
            b = self._request_blocking(req.resource_id, tsk, clusters, times)
            if b is None:
                logger.warning("MPCP remote blocking of %s on resource %d "
                               "exceeds its response time" % (tsk, req.resource_id))
                return Interference(UNLIMITED, UNLIMITED)
            remote += b * req.num_requests
        return remote

    def local_blocking(self, tsk, cluster):
        """ Blocking by gcs of local lower-priority tasks """
        blocking = Interference()
        for t in cluster:
            if t is tsk or not t.requests:
                continue
            if not self.priority_cmp(t.priority, tsk.priority):
                blocking += Interference(1, t.get_max_request_length())

        if self.use_virtual_spinning:
            return blocking
        # each (re-)arrival may find one gcs per lower-priority task
        return blocking * tsk.get_num_arrivals()

    def blocking_bounds(self, info):
        tasks = info.get_tasks()
        resources = util.split_by_resource(tasks)
        clusters = util.split_by_cluster(tasks)

        # 1) priority ceiling of each resource
        ceilings = priority_ceilings(resources, self.priority_cmp)

        # 2) response time of each gcs; only depends on the ceilings
        times = gcs_response_times(clusters, ceilings, self.priority_cmp)

        results = analysis.BlockingBounds(info)

        for i, tsk in enumerate(tasks):
            # 3) remote blocking of each request, depends on the gcs response times
            remote = self.remote_blocking(tsk, clusters, times)

            # 4) local blocking due to boosted lower-priority tasks
            local = self.local_blocking(tsk, clusters[tsk.cluster])

            results[i] = remote + local
            results.set_remote_blocking(i, remote)
            results.set_local_blocking(i, local)

        return results


### DPCP

def split_by_locality(tasks, locality):
    """ Returns a dict mapping each synchronization processor to the requests
    executed on it, longest first. Requests to unassigned resources
    execute on a dedicated synchronization processor (key NO_CPU).
    """
    per_cpu = dict()
    for t in tasks:
        for req in t.requests:
            per_cpu.setdefault(locality[req.resource_id], list()).append(req)
    for cs in per_cpu.values():
        util.sort_by_request_length(cs)
    return per_cpu


def count_requests_to_cpu(tsk, locality, cpu):
    return sum(req.num_requests for req in tsk.requests
               if locality[req.resource_id] == cpu)


class DPCP(analysis.LockingProtocol):
    """ Distributed Priority Ceiling Protocol.

    Critical sections are executed by agents on the processor the resource
    is assigned to, at a priority above all regular jobs.
    """

    def __init__(self, locality,
                 priority_cmp=analysis.prio_low_wins_equal_domination):
        analysis.LockingProtocol.__init__(self)
        assert locality is not None, 'DPCP requires a resource locality'
        # # model.ResourceLocality
        self.locality = locality
        self.priority_cmp = priority_cmp

    def remote_bound(self, tsk, cs, num_reqs):
        """ Blocking of num_reqs requests executed on a remote processor:
        all higher-priority requests during the response time plus one
        lower-priority request per own request """
        blocking = Interference()
        lower = list()
        for req in cs:
            t = req.task
            if t is tsk:
                continue
            if self.priority_cmp(t.priority, tsk.priority):
                num = req.get_max_num_requests(tsk.response)
                blocking += Interference(num, num * req.request_length)
            else:
                lower.append(req)
        return blocking + analysis.bound_blocking(lower, tsk.response,
                                                  num_reqs, num_reqs)

    def local_bound(self, tsk, cs):
        """ Agents on the local processor preempt the task,
        regardless of the priority of the task they act for """
        blocking = Interference()
        for req in cs:
            if req.task is not tsk:
                num = req.get_max_num_requests(tsk.response)
                blocking += Interference(num, num * req.request_length)
        return blocking

    def blocking_bounds(self, info):
        tasks = info.get_tasks()
        per_cpu = split_by_locality(tasks, self.locality)

        results = analysis.BlockingBounds(info)

        for i, tsk in enumerate(tasks):
            remote = Interference()
            local = Interference()
            for cpu in sorted(per_cpu):
                if cpu == tsk.cluster:
                    # local even if tsk does not issue requests to cpu
                    local += self.local_bound(tsk, per_cpu[cpu])
                else:
                    c = count_requests_to_cpu(tsk, self.locality, cpu)
                    if c > 0:
                        remote += self.remote_bound(tsk, per_cpu[cpu], c)

            results[i] = remote + local
            results.set_remote_blocking(i, remote)
            results.set_local_blocking(i, local)

        return results


def part_fmlp_bounds(info, preemptive=True):
    return analysis.analyze(info, PartitionedFMLP(preemptive))


def mpcp_bounds(info, use_virtual_spinning):
    return analysis.analyze(info, MPCP(use_virtual_spinning))


def dpcp_bounds(info, locality):
    assert isinstance(locality, model.ResourceLocality)
    return analysis.analyze(info, DPCP(locality))
