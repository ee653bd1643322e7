"""Tests for iterable steps fanning out over collections."""

import asyncio

import pytest

from hateoas_query import QueryConfig, hateoas
from hateoas_query.accessors import origin_chain


@pytest.fixture
def root():
    return {"links": {"items": {"href": "/items"}}}


@pytest.mark.asyncio
async def test_fan_out_over_all_items(make_transport, root):
    transport = make_transport({"/items": {"items": [{"id": 1}, {"id": 2}]}})

    result = await hateoas(request=transport)(root, "items[]")

    assert result == [{"id": 1, "_origin": root}, {"id": 2, "_origin": root}]
    assert all(item["_origin"] is root for item in result)


@pytest.mark.asyncio
async def test_fan_out_with_index(make_transport, root):
    transport = make_transport({"/items": {"items": [{"id": 1}, {"id": 2}]}})
    result = await hateoas(request=transport)(root, "items[1]")
    assert result == [{"id": 2, "_origin": root}]


@pytest.mark.asyncio
async def test_index_out_of_range_selects_nothing(make_transport, root):
    transport = make_transport({"/items": {"items": [{"id": 1}]}})
    assert await hateoas(request=transport)(root, "items[5]") == []


@pytest.mark.asyncio
async def test_malformed_index_visits_every_item(make_transport, root):
    transport = make_transport({"/items": {"items": [{"id": 1}, {"id": 2}]}})
    result = await hateoas(request=transport)(root, "items[x]")
    assert [item["id"] for item in result] == [1, 2]


@pytest.mark.asyncio
async def test_response_may_be_a_plain_list(make_transport, root):
    transport = make_transport({"/items": [{"id": 1}, {"id": 2}]})
    result = await hateoas(request=transport)(root, "items[]")
    assert [item["id"] for item in result] == [1, 2]


@pytest.mark.asyncio
async def test_fan_out_then_attribute(make_transport, root):
    transport = make_transport({"/items": {"items": [{"id": 1}, {"id": 2}]}})
    assert await hateoas(request=transport)(root, "items[].id") == [1, 2]


@pytest.mark.asyncio
async def test_nested_fan_out_isolated_and_flattened(make_transport):
    transport = make_transport(
        {
            "/accounts": {
                "items": [
                    {"id": "a1", "links": {"invoices": "/a1/invoices"}},
                    {"id": "a2", "links": {"invoices": "/a2/invoices"}},
                ]
            },
            "/a1/invoices": {"items": [{"id": 1}, {"id": 2}]},
            "/a2/invoices": {"items": [{"id": 3}]},
        }
    )
    user = {"links": {"accounts": "/accounts"}}
    q = hateoas(request=transport)

    isolated = await q.isolated(user, "accounts[].invoices[]")
    assert [[inv["id"] for inv in branch] for branch in isolated] == [[1, 2], [3]]

    invoices = await q(user, "accounts[].invoices[]")
    assert [inv["id"] for inv in invoices] == [1, 2, 3]

    # each invoice points back to the account it was fanned out from
    first = invoices[0]
    assert first["_origin"]["id"] == "a1"
    assert origin_chain(first) == [first["_origin"]]
    assert invoices[2]["_origin"]["id"] == "a2"


@pytest.mark.asyncio
async def test_pruned_branches_vanish_after_reduction(make_transport, root):
    transport = make_transport(
        {"/items": {"items": [{"tags": ["x", "y"]}, {"other": 1}, {"tags": ["z"]}]}}
    )
    q = hateoas(request=transport)
    assert await q.isolated(root, "items[].tags") == [["x", "y"], None, ["z"]]
    assert await q(root, "items[].tags") == ["x", "y", "z"]


@pytest.mark.asyncio
async def test_leading_pruned_branch_vanishes(make_transport, root):
    transport = make_transport({"/items": {"items": [{"other": 1}, {"tags": ["z"]}]}})
    q = hateoas(request=transport)
    assert await q.isolated(root, "items[].tags") == [None, ["z"]]
    assert await q(root, "items[].tags") == ["z"]


@pytest.mark.asyncio
async def test_list_of_lists_leaf_keeps_item_structure(make_transport, root):
    """One fan-out level folds once; nested lists inside each leaf survive."""
    transport = make_transport(
        {"/items": {"items": [{"m": [[1, 2]]}, {"m": [[3, 4]]}]}}
    )
    assert await hateoas(request=transport)(root, "items[].m") == [[1, 2], [3, 4]]


@pytest.mark.asyncio
async def test_three_level_fan_out_flattens(make_transport):
    transport = make_transport(
        {
            "/a": {"items": [{"links": {"b": "/b1"}}, {"links": {"b": "/b2"}}]},
            "/b1": {"items": [{"links": {"c": "/c"}}]},
            "/b2": {"items": [{"links": {"c": "/c"}}, {"links": {"c": "/c"}}]},
            "/c": {"items": [{"id": 1}, {"id": 2}]},
        }
    )
    q = hateoas(request=transport)
    result = await q({"links": {"a": "/a"}}, "a[].b[].c[].id")
    assert result == [1, 2, 1, 2, 1, 2]


@pytest.mark.asyncio
async def test_response_without_collection(make_transport, root):
    transport = make_transport({"/items": {"count": 0}})
    assert await hateoas(request=transport)(root, "items[]") == []


@pytest.mark.asyncio
async def test_custom_items_key(make_transport, root):
    transport = make_transport({"/items": {"_embedded": [{"id": 1}]}})
    q = hateoas(request=transport, items_key="_embedded")
    assert [item["id"] for item in await q(root, "items[]")] == [1]


@pytest.mark.asyncio
async def test_branches_run_concurrently(root):
    """Every branch request starts before any of them completes."""
    started = []
    release = asyncio.Event()

    async def request(descriptor):
        if descriptor["path"] == "/items":
            return {"items": [{"links": {"detail": f"/detail/{i}"}} for i in range(3)]}
        started.append(descriptor["path"])
        if len(started) == 3:
            release.set()
        await asyncio.wait_for(release.wait(), timeout=1.0)
        return {"path": descriptor["path"]}

    result = await hateoas(request=request)(root, "items[].detail.path")
    assert result == ["/detail/0", "/detail/1", "/detail/2"]


@pytest.mark.asyncio
async def test_first_failure_cancels_siblings(root):
    cancelled = []

    async def request(descriptor):
        path = descriptor["path"]
        if path == "/items":
            return {"items": [{"links": {"detail": p}} for p in ("/fail", "/slow")]}
        if path == "/fail":
            raise RuntimeError("detail failed")
        try:
            await asyncio.sleep(10)
        except asyncio.CancelledError:
            cancelled.append(path)
            raise
        return {}

    with pytest.raises(RuntimeError, match="detail failed"):
        await hateoas(request=request)(root, "items[].detail")
    # let the cancellation be delivered
    for _ in range(3):
        await asyncio.sleep(0)
    assert cancelled == ["/slow"]


@pytest.mark.asyncio
async def test_accumulator_collects_every_branch(make_transport, root):
    transport = make_transport({"/items": {"items": [{"id": 1}, {"id": 2}]}})
    results = []
    await hateoas(request=transport)(root, "items[].id", results=results)
    assert results[-1] == {"items": [{"id": 1}, {"id": 2}]}
    assert sorted(results[:2]) == [1, 2]


@pytest.mark.asyncio
async def test_config_object_accepted_directly(make_transport, root):
    from hateoas_query import query

    transport = make_transport({"/items": {"items": [{"id": 1}]}})
    result = await query(root, "items[].id", QueryConfig(request=transport))
    assert result == [1]
