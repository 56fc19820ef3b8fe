"""
==============================================================================
Storefront Controller Tests
==============================================================================

Fetch orchestration, request-epoch race guard, search and cart behavior
of the storefront state machine.

==============================================================================
"""

import asyncio

import pytest

from pydantic import ValidationError

from app.catalog.remote import CatalogRemote
from app.core.exceptions import AppException
from app.store.controller import FETCH_ERROR_MESSAGE, StorefrontController
from app.store.state import CatalogState, FetchStatus, FilterState

from conftest import ControlledSource, FakeCatalogBackend, build_products, flush


def by_category(products, category):
    return [p for p in products if p.category == category]


async def loaded_controller(source, products):
    """Controller whose initial fetch has committed ``products``."""
    controller = StorefrontController(source)
    await flush()
    source.respond(0, products)
    await controller.wait_idle()
    return controller


class TestInitialFetch:
    """Tests for controller creation."""

    def test_creation_issues_one_unfiltered_fetch(self):
        """Test initial state and the single fetch for all products."""
        async def scenario():
            source = ControlledSource()
            controller = StorefrontController(source)

            assert controller.category.value == "all"
            assert controller.team == "all"
            assert controller.query == ""
            assert controller.request_epoch == 1
            assert controller.is_loading() is True
            assert controller.error_message() is None
            assert controller.status() == FetchStatus.LOADING

            await flush()
            assert source.calls == [("all", "all")]

            source.respond(0, build_products())
            await controller.wait_idle()
            return controller

        controller = asyncio.run(scenario())
        assert controller.is_loading() is False
        assert len(controller.items) == 5
        assert controller.status() == FetchStatus.READY

    def test_creation_requires_running_loop(self):
        """Test controller cannot be created outside an event loop."""
        with pytest.raises(RuntimeError):
            StorefrontController(ControlledSource())


class TestFilterChanges:
    """Tests for set_category / set_team."""

    def test_category_change_refetches_with_new_filter(self, products):
        """Test category change issues a request and commits its result."""
        async def scenario():
            source = ControlledSource()
            controller = await loaded_controller(source, products)

            task = controller.set_category("jersey")
            assert task is not None
            assert controller.is_loading() is True
            await flush()
            assert source.calls[-1] == ("jersey", "all")

            source.respond(1, by_category(products, "jersey"))
            await task
            return controller

        controller = asyncio.run(scenario())
        assert controller.category.value == "jersey"
        assert [p.category for p in controller.items] == ["jersey"] * 3
        assert controller.is_loading() is False

    def test_team_change_keeps_category(self, products):
        """Test team change is sent together with the current category."""
        async def scenario():
            source = ControlledSource()
            controller = await loaded_controller(source, products)
            controller.set_category("car_model")
            controller.set_team("Ferrari")
            await flush()
            return source.calls

        calls = asyncio.run(scenario())
        assert calls[-1] == ("car_model", "Ferrari")

    def test_same_value_is_noop(self, products):
        """Test setting the current category or team does not refetch."""
        async def scenario():
            source = ControlledSource()
            controller = await loaded_controller(source, products)
            epoch = controller.request_epoch

            assert controller.set_category("all") is None
            assert controller.set_team("all") is None
            await flush()
            return controller, source, epoch

        controller, source, epoch = asyncio.run(scenario())
        assert controller.request_epoch == epoch
        assert len(source.calls) == 1
        assert controller.is_loading() is False
        assert list(controller.items) == products

    def test_unknown_team_is_opaque(self, products):
        """Test unrecognized team names are sent as-is."""
        async def scenario():
            source = ControlledSource()
            controller = await loaded_controller(source, products)
            controller.set_team("Andretti Cadillac")
            await flush()
            return source.calls

        assert asyncio.run(scenario())[-1] == ("all", "Andretti Cadillac")

    def test_unknown_category_rejected_without_fetch(self, products):
        """Test invalid category raises and leaves state untouched."""
        async def scenario():
            source = ControlledSource()
            controller = await loaded_controller(source, products)
            with pytest.raises(AppException) as exc_info:
                controller.set_category("caps")
            return controller, source, exc_info.value

        controller, source, error = asyncio.run(scenario())
        assert error.code == "INVALID_CATEGORY"
        assert controller.category.value == "all"
        assert controller.request_epoch == 1
        assert len(source.calls) == 1


class TestRaceGuard:
    """Tests for last-issued-request-wins."""

    def test_late_response_to_older_request_is_dropped(self, products):
        """Test A's response arriving after B committed never overwrites B."""
        jerseys = by_category(products, "jersey")
        cars = by_category(products, "car_model")

        async def scenario():
            source = ControlledSource()
            controller = await loaded_controller(source, products)

            task_a = controller.set_category("jersey")
            task_b = controller.set_category("car_model")
            await flush()
            assert source.calls[1:] == [("jersey", "all"), ("car_model", "all")]

            source.respond(2, cars)
            await task_b
            assert list(controller.items) == cars

            source.respond(1, jerseys)
            await task_a
            return controller

        controller = asyncio.run(scenario())
        assert list(controller.items) == cars
        assert controller.is_loading() is False
        assert controller.error_message() is None

    def test_older_response_never_overwrites_inflight_newer_request(self, products):
        """Test A settling while B is still in flight has no effect."""
        jerseys = by_category(products, "jersey")
        cars = by_category(products, "car_model")

        async def scenario():
            source = ControlledSource()
            controller = await loaded_controller(source, products)

            task_a = controller.set_category("jersey")
            controller.set_category("car_model")
            await flush()

            source.respond(1, jerseys)
            await task_a
            assert list(controller.items) == products
            assert controller.is_loading() is True

            source.respond(2, cars)
            await controller.wait_idle()
            return controller

        controller = asyncio.run(scenario())
        assert list(controller.items) == cars
        assert controller.is_loading() is False

    def test_superseded_failure_is_ignored(self, products):
        """Test A failing after B committed leaves no error."""
        cars = by_category(products, "car_model")

        async def scenario():
            source = ControlledSource()
            controller = await loaded_controller(source, products)

            task_a = controller.set_category("jersey")
            task_b = controller.set_category("car_model")
            await flush()

            source.respond(2, cars)
            await task_b
            source.fail(1)
            await task_a
            return controller

        controller = asyncio.run(scenario())
        assert controller.error_message() is None
        assert list(controller.items) == cars
        assert controller.status() == FetchStatus.READY

    def test_returning_to_earlier_filter_uses_latest_epoch(self, products):
        """Test jersey → car_model → jersey commits only the third response."""
        jerseys = by_category(products, "jersey")
        cars = by_category(products, "car_model")

        async def scenario():
            source = ControlledSource()
            controller = await loaded_controller(source, products)

            controller.set_category("jersey")
            controller.set_category("car_model")
            controller.set_category("jersey")
            await flush()

            source.respond(1, [jerseys[0]])
            source.respond(3, jerseys)
            source.respond(2, cars)
            await controller.wait_idle()
            return controller

        controller = asyncio.run(scenario())
        assert controller.request_epoch == 4
        assert list(controller.items) == jerseys


class TestFetchFailure:
    """Tests for error settlement."""

    def test_failure_sets_message_and_keeps_items(self, products):
        """Test current failure surfaces the message and preserves the stale list."""
        async def scenario():
            source = ControlledSource()
            controller = await loaded_controller(source, products)

            task = controller.set_category("jersey")
            await flush()
            source.fail(1)
            await task
            return controller

        controller = asyncio.run(scenario())
        assert controller.is_loading() is False
        assert controller.error_message() == FETCH_ERROR_MESSAGE
        assert list(controller.items) == products
        assert controller.status() == FetchStatus.ERROR

    def test_initial_failure_leaves_empty_catalog(self):
        """Test failure of the very first fetch."""
        async def scenario():
            source = ControlledSource()
            controller = StorefrontController(source)
            await flush()
            source.fail(0)
            await controller.wait_idle()
            return controller

        controller = asyncio.run(scenario())
        assert controller.items == ()
        assert controller.error_message() == FETCH_ERROR_MESSAGE

    def test_retry_clears_error_and_reloads(self, products):
        """Test explicit retry re-issues the request for current filters."""
        async def scenario():
            source = ControlledSource()
            controller = StorefrontController(source)
            await flush()
            source.fail(0)
            await controller.wait_idle()

            task = controller.retry()
            assert controller.error_message() is None
            assert controller.is_loading() is True
            await flush()
            source.respond(1, products)
            await task
            return controller, source

        controller, source = asyncio.run(scenario())
        assert source.calls == [("all", "all"), ("all", "all")]
        assert controller.error_message() is None
        assert list(controller.items) == products

    def test_unexpected_source_error_settles_as_failure(self, products):
        """Test a non-catalog exception from the source still ends loading."""
        async def scenario():
            source = ControlledSource()
            controller = await loaded_controller(source, products)

            task = controller.set_category("jersey")
            await flush()
            source.fail(1, RuntimeError("boom"))
            await task
            return controller

        controller = asyncio.run(scenario())
        assert controller.is_loading() is False
        assert controller.error_message() == FETCH_ERROR_MESSAGE
        assert list(controller.items) == products
        assert controller.status() == FetchStatus.ERROR

    def test_superseded_unexpected_error_is_ignored(self, products):
        """Test a crashing older request does not touch the newer result."""
        jerseys = by_category(products, "jersey")

        async def scenario():
            source = ControlledSource()
            controller = await loaded_controller(source, products)

            controller.set_category("car_model")
            controller.set_category("jersey")
            await flush()

            source.respond(2, jerseys)
            source.fail(1, RuntimeError("boom"))
            await controller.wait_idle()
            return controller

        controller = asyncio.run(scenario())
        assert controller.error_message() is None
        assert list(controller.items) == jerseys

    def test_unencodable_team_settles_as_failure(self):
        """Test a team name httpx cannot encode ends in the error state."""
        backend = FakeCatalogBackend()

        async def scenario():
            remote = CatalogRemote(base_url="http://catalog.test", transport=backend.transport())
            controller = StorefrontController(remote)
            await controller.wait_idle()

            controller.set_team("\ud800")
            await controller.wait_idle()
            await remote.aclose()
            return controller

        controller = asyncio.run(scenario())
        assert controller.is_loading() is False
        assert controller.error_message() == FETCH_ERROR_MESSAGE
        assert controller.status() == FetchStatus.ERROR
        assert len(backend.requests) == 1

    def test_settled_state_is_exclusive(self, products):
        """Test after settlement loading is off and exactly one outcome holds."""
        async def scenario():
            source = ControlledSource()
            controller = await loaded_controller(source, products)
            outcomes = []

            for index, succeed in ((1, True), (2, False)):
                controller.retry()
                await flush()
                if succeed:
                    source.respond(index, products[:2])
                else:
                    source.fail(index)
                await controller.wait_idle()
                outcomes.append((
                    controller.is_loading(),
                    controller.error_message(),
                    list(controller.items),
                ))
            return outcomes

        (loading_ok, error_ok, items_ok), (loading_err, error_err, items_err) = asyncio.run(scenario())
        assert loading_ok is False and error_ok is None and items_ok == products[:2]
        assert loading_err is False and error_err == FETCH_ERROR_MESSAGE and items_err == products[:2]


class TestQueryAndCart:
    """Tests for client-side search and cart accumulation."""

    def test_query_filters_without_refetch(self, products):
        """Test search narrows the visible list and issues no request."""
        async def scenario():
            source = ControlledSource()
            controller = await loaded_controller(source, products)
            controller.set_query("FERRARI")
            await flush()
            return controller, source

        controller, source = asyncio.run(scenario())
        assert len(source.calls) == 1
        assert [p.id for p in controller.visible_products()] == ["fer-sf24-118", "fer-home-24"]
        assert len(controller.items) == 5

    def test_empty_result_is_distinct_from_failure(self, products):
        """Test a query matching nothing reports empty, not error."""
        async def scenario():
            source = ControlledSource()
            controller = await loaded_controller(source, products)
            controller.set_query("williams")
            return controller

        controller = asyncio.run(scenario())
        assert controller.visible_products() == []
        assert controller.error_message() is None
        assert controller.status() == FetchStatus.EMPTY

    def test_add_same_product_twice(self, products):
        """Test repeated additions are kept as separate entries."""
        async def scenario():
            source = ControlledSource()
            controller = await loaded_controller(source, products)
            controller.add_to_cart(products[0])
            controller.add_to_cart(products[0])
            return controller

        controller = asyncio.run(scenario())
        assert controller.cart_count() == 2
        assert controller.cart_entries() == (products[0], products[0])

    def test_cart_survives_filter_changes(self, products):
        """Test cart is independent of catalog refetches."""
        async def scenario():
            source = ControlledSource()
            controller = await loaded_controller(source, products)
            controller.add_to_cart(products[1])
            controller.set_category("jersey")
            await flush()
            source.fail(1)
            await controller.wait_idle()
            return controller

        assert asyncio.run(scenario()).cart_count() == 1


class TestNotifications:
    """Tests for subscribe / snapshot."""

    def test_listeners_see_each_transition(self, products):
        """Test listeners are told about issue, settle, query and cart changes."""
        async def scenario():
            source = ControlledSource()
            controller = await loaded_controller(source, products)
            seen = []
            unsubscribe = controller.subscribe(lambda c: seen.append(c.status()))

            task = controller.set_category("jersey")
            await flush()
            source.respond(1, by_category(products, "jersey"))
            await task
            controller.set_query("papaya")
            controller.add_to_cart(products[4])

            unsubscribe()
            controller.set_query("")
            return seen

        assert asyncio.run(scenario()) == [
            FetchStatus.LOADING,
            FetchStatus.READY,
            FetchStatus.READY,
            FetchStatus.READY,
        ]

    def test_superseded_settlement_does_not_notify(self, products):
        """Test a dropped response produces no notification."""
        async def scenario():
            source = ControlledSource()
            controller = await loaded_controller(source, products)
            task_a = controller.set_category("jersey")
            controller.set_category("car_model")
            await flush()

            count = []
            controller.subscribe(lambda c: count.append(1))
            source.respond(1, products)
            await task_a
            return len(count)

        assert asyncio.run(scenario()) == 0

    def test_failing_listener_does_not_break_others(self, products):
        """Test listener exceptions are contained."""
        async def scenario():
            source = ControlledSource()
            controller = await loaded_controller(source, products)
            seen = []

            def broken(_):
                raise ValueError("render failed")

            controller.subscribe(broken)
            controller.subscribe(lambda c: seen.append(c.query))
            controller.set_query("rb")
            return seen

        assert asyncio.run(scenario()) == ["rb"]

    def test_snapshot_renders_visible_products(self, products):
        """Test snapshot fields and price formatting."""
        async def scenario():
            source = ControlledSource()
            controller = await loaded_controller(source, products)
            controller.set_query("scale model")
            controller.add_to_cart(products[1])
            return controller.snapshot()

        snapshot = asyncio.run(scenario())
        assert snapshot.status == FetchStatus.READY
        assert snapshot.total == 2
        assert [p.id for p in snapshot.products] == ["fer-sf24-118", "404"]
        assert snapshot.products[0].price_display == "₹ 15,999"
        assert snapshot.cart_count == 1
        assert snapshot.query == "scale model"


class TestStateModels:
    """Tests for controller-owned state validation."""

    def test_epoch_cannot_go_negative(self):
        state = CatalogState()
        state.request_epoch += 1
        with pytest.raises(ValidationError):
            state.request_epoch = -1
        assert state.request_epoch == 1

    def test_category_assignment_is_coerced(self):
        """Test assigning a raw string stores the enum member."""
        filters = FilterState()
        filters.category = "car_model"
        assert filters.category.value == "car_model"
        with pytest.raises(ValidationError):
            filters.category = "helmet"
