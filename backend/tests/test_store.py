import random

from app.services.leaderboard import MemoryOrderedStore
from app.services.leaderboard.store import SkipList


def reference_descending(members):
    return sorted(members.items(), key=lambda kv: (kv[1], kv[0]), reverse=True)


def test_skiplist_matches_sorted_reference():
    rng = random.Random(11)
    sl = SkipList(random.Random(5))
    live = {}
    for step in range(2000):
        if live and rng.random() < 0.3:
            member = rng.choice(sorted(live))
            assert sl.delete(live.pop(member), member)
        else:
            member = f'm{rng.randint(0, 400):04d}'
            if member in live:
                continue
            live[member] = rng.randint(0, 50)
            sl.insert(live[member], member)
        assert len(sl) == len(live)

    ascending = sorted(live.items(), key=lambda kv: (kv[1], kv[0]))
    for position, (member, score) in enumerate(ascending, start=1):
        assert sl.rank_of(score, member) == position
        node = sl.node_at(position)
        assert (node.member, node.score) == (member, score)
    assert sl.node_at(len(live) + 1) is None
    assert sl.node_at(0) is None


def test_delete_missing_member():
    sl = SkipList()
    sl.insert(1, 'a')
    assert sl.delete(1, 'b') is False
    assert sl.delete(2, 'a') is False
    assert sl.delete(1, 'a') is True
    assert len(sl) == 0
    assert sl.tail is None


def test_range_descending_pages():
    store = MemoryOrderedStore(random.Random(1))
    live = {}
    for i in range(57):
        live[f'k{i:02d}'] = i % 9
        store.insert(f'k{i:02d}', i % 9)
    expected = reference_descending(live)
    assert store.range_descending(0, 100) == expected
    assert store.range_descending(10, 5) == expected[10:15]
    assert store.range_descending(55, 10) == expected[55:]
    assert store.range_descending(57, 10) == []
    assert store.range_descending(0, 0) == []


def test_rank_is_zero_based_descending():
    store = MemoryOrderedStore()
    store.insert('low', 1)
    store.insert('high', 9)
    store.insert('mid', 5)
    assert store.rank('high') == 0
    assert store.rank('mid') == 1
    assert store.rank('low') == 2
    assert store.rank('missing') is None


def test_insert_updates_existing_member():
    store = MemoryOrderedStore()
    assert store.insert('a', 1) is True
    assert store.insert('b', 2) is True
    assert store.insert('a', 3) is False
    assert store.size() == 2
    assert store.range_descending(0, 2) == [('a', 3), ('b', 2)]


def test_remove_lowest_and_trim():
    store = MemoryOrderedStore()
    for i in range(10):
        store.insert(f'k{i}', i)
    assert store.remove_lowest(3) == 3
    assert store.rank('k0') is None
    assert store.size() == 7
    assert store.trim(4) == 3
    assert [m for m, _ in store.range_descending(0, 10)] == ['k9', 'k8', 'k7', 'k6']
    assert store.trim(10) == 0
    assert store.remove_lowest(50) == 4
    assert store.size() == 0


def test_sequences_increase():
    store = MemoryOrderedStore()
    seqs = [store.next_sequence() for _ in range(5)]
    assert seqs == sorted(seqs)
    assert len(set(seqs)) == 5


def test_clear():
    store = MemoryOrderedStore()
    store.insert('a', 1)
    store.clear()
    assert store.size() == 0
    assert store.range_descending(0, 5) == []
    store.insert('a', 2)
    assert store.rank('a') == 0
