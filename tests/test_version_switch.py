"""Tests for the version dropdown state machine and switch execution.

Author: Michael Economou
Date: 2026-02-15
"""

from __future__ import annotations

import asyncio

import pytest

from modkeep.core.errors import ContentOperationError, VersionSwitchError
from modkeep.core.version_switch import (
    MSG_FETCH_FAILED,
    MSG_NO_VERSIONS,
    MSG_UNAVAILABLE,
    DropdownState,
    VersionSwitcher,
)
from modkeep.models.content_item import ContentType, Platform, Profile
from tests.mocks import (
    FakeContentStore,
    FakeRegistry,
    SignalRecorder,
    curseforge_item,
    make_item,
    make_version,
    modrinth_item,
    settle,
)


@pytest.fixture
def switcher(registry: FakeRegistry, store: FakeContentStore) -> VersionSwitcher:
    return VersionSwitcher(registry, store)


class TestDropdown:
    @pytest.mark.asyncio
    async def test_open_loads_versions_and_marks_current(
        self, switcher: VersionSwitcher, registry: FakeRegistry, profile: Profile
    ) -> None:
        registry.add_versions("P1", make_version("V2"), make_version("V1"))
        item = modrinth_item("a.jar", "P1", "V1")
        states = SignalRecorder(switcher.dropdown_changed)

        dropdown = await switcher.open(item, profile)

        assert dropdown.state is DropdownState.LOADED
        assert [v.id for v in dropdown.versions] == ["V2", "V1"]
        assert dropdown.current_ids == frozenset({"V1"})
        assert dropdown.is_current(dropdown.versions[1])
        assert switcher.open_key == "a.jar"
        assert [d.state for d in states.values] == [
            DropdownState.OPENING,
            DropdownState.LOADING,
            DropdownState.LOADED,
        ]
        assert registry.calls_named("list_versions")[0][3:] == (["fabric"], ["1.20.1"])

    @pytest.mark.asyncio
    async def test_curseforge_item_uses_curseforge(
        self, switcher: VersionSwitcher, registry: FakeRegistry, profile: Profile
    ) -> None:
        registry.add_versions("7", make_version("F1"), platform=Platform.CURSEFORGE)

        dropdown = await switcher.open(curseforge_item("jei.jar", "7", "F1"), profile)

        assert registry.calls_named("list_versions")[0][1] is Platform.CURSEFORGE
        assert dropdown.current_ids == frozenset({"F1"})

    @pytest.mark.asyncio
    async def test_pack_versions_are_not_filtered_by_loader(
        self, switcher: VersionSwitcher, registry: FakeRegistry, profile: Profile
    ) -> None:
        item = modrinth_item("pack.zip", "RP", "R1", content_type=ContentType.SHADER_PACK)

        await switcher.open(item, profile)

        assert registry.calls_named("list_versions")[0][3] is None

    @pytest.mark.asyncio
    async def test_item_without_project_is_unavailable(
        self, switcher: VersionSwitcher, registry: FakeRegistry, profile: Profile
    ) -> None:
        dropdown = await switcher.open(make_item("local.jar", sha1_hash="abc"), profile)

        assert dropdown.state is DropdownState.UNAVAILABLE
        assert dropdown.message == MSG_UNAVAILABLE
        assert dropdown.is_open
        assert registry.calls == []

    @pytest.mark.asyncio
    async def test_empty_version_list(
        self, switcher: VersionSwitcher, profile: Profile
    ) -> None:
        dropdown = await switcher.open(modrinth_item("a.jar", "P1", "V1"), profile)

        assert dropdown.state is DropdownState.LOADED
        assert dropdown.versions == ()
        assert dropdown.message == MSG_NO_VERSIONS

    @pytest.mark.asyncio
    async def test_fetch_error_is_kept_until_close(
        self, switcher: VersionSwitcher, registry: FakeRegistry, profile: Profile
    ) -> None:
        registry.fail("P1", "HTTP 503")

        dropdown = await switcher.open(modrinth_item("a.jar", "P1", "V1"), profile)

        assert dropdown.state is DropdownState.ERRORED
        assert dropdown.message == "HTTP 503"
        assert switcher.dropdown.message == "HTTP 503"

        switcher.close()

        assert switcher.dropdown.state is DropdownState.CLOSED
        assert switcher.dropdown.message is None
        assert switcher.open_key is None

    @pytest.mark.asyncio
    async def test_unexpected_fetch_error_is_errored(
        self, switcher: VersionSwitcher, registry: FakeRegistry, profile: Profile
    ) -> None:
        registry.errors[(Platform.MODRINTH, "P1")] = RuntimeError("client bug")

        dropdown = await switcher.open(modrinth_item("a.jar", "P1", "V1"), profile)

        assert dropdown.state is DropdownState.ERRORED
        assert dropdown.message == MSG_FETCH_FAILED
        assert not dropdown.is_loading

    @pytest.mark.asyncio
    async def test_opening_second_item_closes_first(
        self, switcher: VersionSwitcher, registry: FakeRegistry, profile: Profile
    ) -> None:
        first = modrinth_item("a.jar", "P1", "V1")
        second = modrinth_item("b.jar", "P2", "W1")

        await switcher.open(first, profile)
        await switcher.open(second, profile)

        assert switcher.dropdown.is_open_for("b.jar")
        assert not switcher.dropdown.is_open_for("a.jar")

        switcher.close()

        assert not switcher.dropdown.is_open_for("a.jar")
        assert not switcher.dropdown.is_open_for("b.jar")
        assert switcher.dropdown.state is DropdownState.CLOSED

    @pytest.mark.asyncio
    async def test_toggle_opens_then_closes(
        self, switcher: VersionSwitcher, profile: Profile
    ) -> None:
        item = modrinth_item("a.jar", "P1", "V1")

        await switcher.toggle(item, profile)
        assert switcher.open_key == "a.jar"

        await switcher.toggle(item, profile)
        assert switcher.open_key is None

    def test_forget_only_closes_matching_dropdown(self, switcher: VersionSwitcher) -> None:
        switcher.forget("missing.jar")
        assert switcher.dropdown.state is DropdownState.CLOSED


class TestStaleResults:
    """Fetch results are applied only to the dropdown that requested them."""

    @pytest.mark.asyncio
    async def test_result_after_close_is_discarded(
        self, switcher: VersionSwitcher, registry: FakeRegistry, profile: Profile
    ) -> None:
        gate = asyncio.Event()
        registry.gates["P1"] = gate
        registry.add_versions("P1", make_version("V2"))

        task = asyncio.create_task(switcher.open(modrinth_item("a.jar", "P1", "V1"), profile))
        await settle()
        assert switcher.dropdown.state is DropdownState.LOADING

        switcher.close()
        gate.set()
        await task

        assert switcher.dropdown.state is DropdownState.CLOSED
        assert switcher.dropdown.versions == ()

    @pytest.mark.asyncio
    async def test_error_after_close_is_discarded(
        self, switcher: VersionSwitcher, registry: FakeRegistry, profile: Profile
    ) -> None:
        gate = asyncio.Event()
        registry.gates["P1"] = gate
        registry.fail("P1", "boom")

        task = asyncio.create_task(switcher.open(modrinth_item("a.jar", "P1", "V1"), profile))
        await settle()
        switcher.close()
        gate.set()
        await task

        assert switcher.dropdown.state is DropdownState.CLOSED
        assert switcher.dropdown.message is None

    @pytest.mark.asyncio
    async def test_old_fetch_does_not_populate_reopened_dropdown(
        self,
        switcher: VersionSwitcher,
        registry: FakeRegistry,
        store: FakeContentStore,
        profile: Profile,
    ) -> None:
        """Switch on A while B's dropdown is loading; A's late result is ignored."""
        gate_a, gate_b = asyncio.Event(), asyncio.Event()
        registry.gates.update({"PA": gate_a, "PB": gate_b})
        registry.add_versions("PA", make_version("A2", project_id="PA"))
        registry.add_versions("PB", make_version("B2", project_id="PB"))
        item_a = modrinth_item("a.jar", "PA", "A1")
        item_b = modrinth_item("b.jar", "PB", "B1")
        store.add(item_a, item_b)

        task_a = asyncio.create_task(switcher.open(item_a, profile))
        await settle()
        task_b = asyncio.create_task(switcher.open(item_b, profile))
        await settle()

        await switcher.switch(item_a, make_version("A2", project_id="PA"), profile)
        assert switcher.dropdown.is_open_for("b.jar")

        gate_a.set()
        await task_a
        assert switcher.dropdown.is_open_for("b.jar")
        assert switcher.dropdown.state is DropdownState.LOADING
        assert switcher.dropdown.versions == ()

        gate_b.set()
        await task_b
        assert switcher.dropdown.state is DropdownState.LOADED
        assert [v.id for v in switcher.dropdown.versions] == ["B2"]


class TestSwitch:
    @pytest.mark.asyncio
    async def test_switch_installs_new_and_removes_old(
        self, switcher: VersionSwitcher, store: FakeContentStore, profile: Profile
    ) -> None:
        item = modrinth_item("a-1.0.jar", "P1", "V1")
        store.add(item)

        new_filename = await switcher.switch(item, make_version("V2", "a-1.1.jar"), profile)

        assert new_filename == "a-1.1.jar"
        assert set(store.files) == {"a-1.1.jar"}
        assert store.files["a-1.1.jar"].modrinth_info.version_id == "V2"

    @pytest.mark.asyncio
    async def test_switch_keeps_disabled_state(
        self, switcher: VersionSwitcher, store: FakeContentStore, profile: Profile
    ) -> None:
        item = modrinth_item("a-1.0.jar.disabled", "P1", "V1")
        store.add(item)

        new_filename = await switcher.switch(item, make_version("V2", "a-1.1.jar"), profile)

        assert new_filename == "a-1.1.jar.disabled"
        assert set(store.files) == {"a-1.1.jar.disabled"}
        assert store.files[new_filename].is_disabled

    @pytest.mark.asyncio
    async def test_same_filename_is_not_deleted(
        self, switcher: VersionSwitcher, store: FakeContentStore, profile: Profile
    ) -> None:
        item = modrinth_item("a.jar", "P1", "V1")
        store.add(item)

        await switcher.switch(item, make_version("V2", "a.jar"), profile)

        assert store.calls_named("delete") == []
        assert "a.jar" in store.files

    @pytest.mark.asyncio
    async def test_version_without_files_raises(
        self, switcher: VersionSwitcher, store: FakeContentStore, profile: Profile
    ) -> None:
        item = modrinth_item("a.jar", "P1", "V1")

        with pytest.raises(VersionSwitchError):
            await switcher.switch(item, make_version("V2", files=()), profile)
        assert store.calls == []

    @pytest.mark.asyncio
    async def test_install_failure_keeps_old_file(
        self, switcher: VersionSwitcher, store: FakeContentStore, profile: Profile
    ) -> None:
        item = modrinth_item("a.jar", "P1", "V1")
        store.add(item)
        store.fail_on["a-2.jar"] = "disk full"

        with pytest.raises(ContentOperationError):
            await switcher.switch(item, make_version("V2", "a-2.jar"), profile)
        assert "a.jar" in store.files

    @pytest.mark.asyncio
    async def test_switch_closes_dropdown_of_same_item(
        self, switcher: VersionSwitcher, store: FakeContentStore, profile: Profile
    ) -> None:
        item = modrinth_item("a.jar", "P1", "V1")
        store.add(item)
        await switcher.open(item, profile)

        await switcher.switch(item, make_version("V2", "a-2.jar"), profile)

        assert switcher.dropdown.state is DropdownState.CLOSED

    @pytest.mark.asyncio
    async def test_failed_delete_removes_new_file(
        self, switcher: VersionSwitcher, store: FakeContentStore, profile: Profile
    ) -> None:
        item = modrinth_item("a.jar", "P1", "V1")
        store.add(item)
        store.fail_on["a.jar"] = "locked"

        with pytest.raises(ContentOperationError, match="locked"):
            await switcher.switch(item, make_version("V2", "a-2.jar"), profile)

        assert set(store.files) == {"a.jar"}
        assert store.calls_named("delete") == [("delete", "a.jar"), ("delete", "a-2.jar")]

    @pytest.mark.asyncio
    async def test_failed_rollback_keeps_original_error(
        self, switcher: VersionSwitcher, store: FakeContentStore, profile: Profile
    ) -> None:
        item = modrinth_item("a.jar", "P1", "V1")
        store.add(item)

        async def locked_delete(target):
            raise ContentOperationError(target.filename, "delete", f"{target.filename} locked")

        store.delete_file = locked_delete

        with pytest.raises(ContentOperationError, match=r"^delete failed for a\.jar:"):
            await switcher.switch(item, make_version("V2", "a-2.jar"), profile)
        assert set(store.files) == {"a.jar", "a-2.jar"}
