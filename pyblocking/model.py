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

It should be imported in scripts that do the analysis.
We model task sets that share resources (critical sections).
Each task issues a bounded number of requests of bounded length
per job to each resource it accesses, either as a reader or as a writer.
Resources may be pinned to a processor (ResourceLocality) and
may be replicated (ReplicaInfo).
"""

from __future__ import absolute_import
from __future__ import print_function
from __future__ import unicode_literals
from __future__ import division

import logging
import sys

from . import options
from . import util

# request types
WRITE = 0
READ = 1

NO_CPU = options.NO_CPU

# numerically lower values denote higher priorities
LOWEST_PRIORITY = sys.maxsize

logger = logging.getLogger("pyblocking")


class RequestBound (object):
    """ A kind of request one task issues to one resource.
    num_requests and request_length bound any job of the task.
    """

    def __init__(self, resource_id, num_requests, request_length, task,
                 request_type=WRITE):
        """ CTOR """
        assert request_type in (WRITE, READ), \
            'invalid request type %r' % (request_type,)
        assert resource_id >= 0, 'resource ids must be non-negative'
        assert num_requests >= 0
        assert request_length >= 0

        # # Identifier of the accessed resource
        self.resource_id = resource_id

        # # Maximum number of requests per job
        self.num_requests = num_requests

        # # Maximum critical section length
        self.request_length = request_length

        # # Link to the issuing TaskInfo
        self.task = task

        # # READ or WRITE
        self.request_type = request_type

    def __repr__(self):
        kind = "R" if self.is_read() else "W"
        return "%s(res=%d, n=%d, len=%d)" % (kind, self.resource_id,
                                             self.num_requests,
                                             self.request_length)

    def get_max_num_requests(self, interval):
        """ Maximum number of requests the task can issue
        in any interval of length interval.
        Jobs released before the interval may still be pending,
        so the response time widens the window.
        """
        num_jobs = util.divide_with_ceil(interval + self.task.response,
                                         self.task.period)
        return num_jobs * self.num_requests

    def get_resource_id(self):
        return self.resource_id

    def get_num_requests(self):
        return self.num_requests

    def get_request_length(self):
        return self.request_length

    def get_request_type(self):
        return self.request_type

    def is_read(self):
        return self.request_type == READ

    def is_write(self):
        return self.request_type == WRITE

    def get_task(self):
        return self.task


class TaskInfo (object):
    """ A sporadic real-time task as seen by the blocking analysis.
    The response time is an assumed (or previously computed) bound,
    it determines how many requests other tasks can issue while a job
    of this task is pending.
    """

    def __init__(self, period, response, cluster=0, priority=LOWEST_PRIORITY):
        """ CTOR """
        assert period > 0, 'period must be positive'
        assert response >= 0
        assert cluster >= 0

        # # Minimum inter-arrival time
        self.period = period

        # # Worst-case response time
        self.response = response

        # # Cluster (or partition) the task is assigned to
        self.cluster = cluster

        # # Scheduling priority, lower values are more important
        self.priority = priority

        # # List of RequestBound in declaration order
        self.requests = list()

    def __repr__(self):
        return "TaskInfo(T=%d, R=%d, cluster=%d, prio=%d)" % \
            (self.period, self.response, self.cluster, self.priority)

    def add_request(self, resource_id, num, length, request_type=WRITE):
        """ Adds a request bound to this task.
        Returns the RequestBound """
        req = RequestBound(resource_id, num, length, self, request_type)
        self.requests.append(req)
        return req

    def get_requests(self):
        return self.requests

    def get_priority(self):
        return self.priority

    def get_period(self):
        return self.period

    def get_response(self):
        return self.response

    def get_cluster(self):
        return self.cluster

    def get_num_arrivals(self):
        """ Number of times a job (re-)arrives at the scheduler:
        once per request plus one for the job release """
        return self.get_total_num_requests() + 1

    def get_total_num_requests(self):
        return sum(req.num_requests for req in self.requests)

    def get_max_request_length(self):
        return max([req.request_length for req in self.requests] + [0])


class ResourceSharingInfo (object):
    """ The task set under analysis.
    Tasks are indexed in the order they were added; analyses report
    their results in the same order.
    """

    def __init__(self):
        """ CTOR """
        # # List of TaskInfo
        self.tasks = list()

    def __len__(self):
        return len(self.tasks)

    def __iter__(self):
        return iter(self.tasks)

    def get_tasks(self):
        return self.tasks

    def add_task(self, period, response, cluster=0, priority=LOWEST_PRIORITY):
        """ Adds a task to the task set.
        Returns the new TaskInfo, which serves as handle for add_request()
        """
        t = TaskInfo(period, response, cluster, priority)
        self.tasks.append(t)
        return t

    def add_request(self, task, resource_id, max_num, max_length):
        """ Adds a write (exclusive) request to task.
        Returns the RequestBound """
        return self.add_request_rw(task, resource_id, max_num, max_length, WRITE)

    def add_request_rw(self, task, resource_id, max_num, max_length, request_type):
        """ Adds a request of the given type (READ or WRITE) to task.
        Returns the RequestBound """
        assert len(self.tasks) > 0, 'no task has been added yet'
        assert any(t is task for t in self.tasks), \
            'task %s is not part of this task set' % (task,)
        assert request_type in (WRITE, READ), \
            'invalid request type %r' % (request_type,)
        return task.add_request(resource_id, max_num, max_length, request_type)

    def as_mutex(self):
        """ Returns a copy of the task set in which every request
        is treated as a write request """
        mtx = ResourceSharingInfo()
        for t in self.tasks:
            t_mtx = mtx.add_task(t.period, t.response, t.cluster, t.priority)
            for req in t.requests:
                mtx.add_request(t_mtx, req.resource_id, req.num_requests,
                                req.request_length)
        return mtx


class ResourceLocality (object):
    """ Maps resources to the processor that executes their critical
    sections. Resources never assigned are mapped to NO_CPU.
    """

    def __init__(self):
        """ CTOR """
        self.mapping = list()

    def assign_resource(self, res_id, processor):
        assert res_id >= 0
        assert processor >= 0 or processor == NO_CPU
        while len(self.mapping) <= res_id:
            self.mapping.append(NO_CPU)
        self.mapping[res_id] = processor

    def __getitem__(self, res_id):
        if len(self.mapping) <= res_id:
            return NO_CPU
        return self.mapping[res_id]

    def __repr__(self):
        return "ResourceLocality(%s)" % (self.mapping,)


class ReplicaInfo (object):
    """ Number of replicas of each resource (k-exclusion).
    Resources never configured are not replicated (one replica).
    """

    def __init__(self):
        """ CTOR """
        self.num_replicas = list()

    def set_replicas(self, res_id, replicas):
        assert replicas >= 1, 'resource %d needs at least one replica' % res_id
        assert res_id >= 0
        while len(self.num_replicas) <= res_id:
            # default: not replicated
            self.num_replicas.append(1)
        self.num_replicas[res_id] = replicas

    def __getitem__(self, res_id):
        if len(self.num_replicas) <= res_id:
            return 1
        return self.num_replicas[res_id]

    def __repr__(self):
        return "ReplicaInfo(%s)" % (self.num_replicas,)
