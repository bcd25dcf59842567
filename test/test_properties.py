"""
| Copyright (C) 2015 Johannes Schlatow
| TU Braunschweig, Germany
| All rights reserved.
| See LICENSE file for copyright and license details.

:Authors:
         - Johannes Schlatow

Description
-----------

Properties every analysis has to satisfy
"""

import pytest

from pyblocking import analysis
from pyblocking import aware
from pyblocking import model
from pyblocking import oblivious
from pyblocking import spinlocks
from pyblocking.analysis import Interference


def _locality():
    loc = model.ResourceLocality()
    loc.assign_resource(0, 1)
    loc.assign_resource(1, 0)
    return loc


def _replicas():
    rep = model.ReplicaInfo()
    rep.set_replicas(1, 2)
    return rep


ANALYSES = {
    'task_fair_mutex': lambda info: spinlocks.task_fair_mutex_bounds(info, 2),
    'task_fair_rw': lambda info: spinlocks.task_fair_rw_bounds(info, 2),
    'phase_fair_rw': lambda info: spinlocks.phase_fair_rw_bounds(info, 2),
    'global_omlp': lambda info: oblivious.global_omlp_bounds(info, 4),
    'global_fmlp': lambda info: oblivious.global_fmlp_bounds(info),
    'clustered_omlp': lambda info: oblivious.clustered_omlp_bounds(info, 2),
    'clustered_rw_omlp': lambda info: oblivious.clustered_rw_omlp_bounds(info, 2),
    'clustered_kx_omlp': lambda info: oblivious.clustered_kx_omlp_bounds(info, _replicas(), 2),
    'part_omlp': lambda info: oblivious.part_omlp_bounds(info),
    'part_fmlp': lambda info: aware.part_fmlp_bounds(info, True),
    'part_fmlp_np': lambda info: aware.part_fmlp_bounds(info, False),
    'mpcp': lambda info: aware.mpcp_bounds(info, False),
    'mpcp_vspin': lambda info: aware.mpcp_bounds(info, True),
    'dpcp': lambda info: aware.dpcp_bounds(info, _locality()),
}


def _task_set(num=1, length=10):
    """ four tasks on two clusters, the first request of the first task
    is parameterized """
    info = model.ResourceSharingInfo()
    t0 = info.add_task(100, 60, 0, 1)
    info.add_request(t0, 0, num, length)
    info.add_request_rw(t0, 1, 1, 4, model.READ)
    t1 = info.add_task(150, 80, 0, 2)
    info.add_request(t1, 0, 2, 7)
    info.add_request_rw(t1, 1, 1, 9, model.WRITE)
    t2 = info.add_task(200, 120, 1, 1)
    info.add_request_rw(t2, 1, 2, 6, model.READ)
    info.add_request(t2, 2, 1, 12)
    t3 = info.add_task(300, 200, 1, 3)
    info.add_request(t3, 0, 1, 15)
    info.add_request(t3, 2, 2, 3)
    return info


@pytest.fixture(params=sorted(ANALYSES))
def bounds(request):
    return ANALYSES[request.param]


def test_task_without_requests(bounds):
    info = model.ResourceSharingInfo()
    info.add_task(100, 50)
    res = bounds(info)
    assert len(res) == 1
    for inf in res.categories(0).values():
        assert inf == Interference(0, 0)


# analyses under which a task without requests suffers no blocking even if
# a local lower-priority task holds a resource upon its release
NO_BLOCKING_WITHOUT_REQUESTS = set(['global_omlp', 'global_fmlp', 'part_omlp',
                                    'dpcp'])


@pytest.mark.parametrize('name', sorted(ANALYSES))
def test_task_without_requests_among_others(name):
    info = model.ResourceSharingInfo()
    info.add_task(100, 50, 0, 1)
    low = info.add_task(100, 50, 0, 2)
    info.add_request(low, 0, 1, 10)
    remote = info.add_task(100, 50, 1, 1)
    info.add_request(remote, 0, 1, 20)

    res = ANALYSES[name](info)
    categories = res.categories(0)
    assert categories['remote'] == Interference()
    unblocked = all(inf == Interference() for inf in categories.values())
    assert unblocked == (name in NO_BLOCKING_WITHOUT_REQUESTS)


def test_size_and_invariants(bounds):
    info = _task_set()
    res = bounds(info)
    assert res.size() == len(info)
    assert analysis.check_bounds(res)


def test_determinism(bounds):
    info = _task_set()
    assert bounds(info) == bounds(info)
    assert bounds(info) == bounds(_task_set())


def test_monotonic_in_num_requests(bounds):
    previous = None
    for num in range(4):
        term = bounds(_task_set(num=num)).get_blocking_term(0)
        if previous is not None:
            assert term >= previous
        previous = term


def test_monotonic_in_request_length(bounds):
    previous = None
    for length in (1, 10, 25, 60):
        res = bounds(_task_set(length=length))
        if previous is not None:
            for i in range(len(res)):
                assert res.get_blocking_term(i) >= previous.get_blocking_term(i)
        previous = res
