import sys
from pathlib import Path

# Ensure project root is on PYTHONPATH when tests are run via `pytest`
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from structures import Graph, MaxPriorityQueue, Queue


def test_queue_is_fifo_and_empty_dequeue_returns_none():
    q = Queue()
    assert q.dequeue() is None
    assert q.peek() is None

    for x in ["a", "b", "c"]:
        q.enqueue(x)

    assert q.peek() == "a"
    assert [q.dequeue(), q.dequeue()] == ["a", "b"]
    assert q.size() == 1
    assert q.dequeue() == "c"
    assert q.is_empty()
    assert q.dequeue() is None


def test_queue_keeps_order_across_compaction():
    q = Queue()
    for i in range(200):
        q.enqueue(i)
    taken = [q.dequeue() for _ in range(120)]
    assert taken == list(range(120))
    assert len(q) == 80

    for i in range(200, 210):
        q.enqueue(i)

    rest = []
    while not q.is_empty():
        rest.append(q.dequeue())
    assert rest == list(range(120, 210))


def test_max_priority_queue_pops_highest_first():
    pq = MaxPriorityQueue()
    assert pq.pop() is None
    assert pq.peek() is None

    for x in [5, 1, 9, 3, 7]:
        pq.push(x)

    assert pq.peek() == 9
    assert len(pq) == 5
    assert [pq.pop() for _ in range(5)] == [9, 7, 5, 3, 1]
    assert pq.is_empty()


def test_max_priority_queue_uses_comparator():
    # Fewer items first: comparator says "a wins" when a is smaller.
    pq = MaxPriorityQueue(lambda a, b: b["n"] - a["n"])
    for name, n in [("x", 4), ("y", 1), ("z", 2)]:
        pq.push({"name": name, "n": n})

    assert [pq.pop()["name"] for _ in range(3)] == ["y", "z", "x"]


def test_max_priority_queue_ties_are_deterministic():
    def run():
        pq = MaxPriorityQueue(lambda a, b: a[0] - b[0])
        for item in [(2, "a"), (2, "b"), (1, "c"), (2, "d")]:
            pq.push(item)
        return [pq.pop() for _ in range(4)]

    first = run()
    assert first == run()
    assert [p[0] for p in first] == [2, 2, 2, 1]


def test_graph_is_undirected_and_ignores_missing_endpoints():
    g = Graph()
    g.add_edge((0, 0), (0, 1))
    g.add_edge((0, 0), None)
    g.add_node((5, 5))

    assert (0, 1) in g.neighbors((0, 0))
    assert (0, 0) in g.neighbors((0, 1))
    assert g.neighbors((5, 5)) == set()
    assert g.neighbors((9, 9)) == set()
    assert len(g) == 3
