"""Tests for publish/service.py."""

import json

import httpx
import pytest
import respx

from octomatiz.config import Settings
from octomatiz.publish import (
    PageRecord,
    ProjectPayload,
    ProjectValidationError,
    publish_page,
    resolve_page,
)
from octomatiz.publish.service import FALLBACK_SLUG, missing_project_fields
from octomatiz.shortener import short_key
from octomatiz.storage import StorageGate
from octomatiz.types import ErrorCode

BASE_URL = "https://octo.test"
HTML = "<!DOCTYPE html><html><body><h1>Toko Budi</h1></body></html>"


@pytest.fixture
def settings():
    """Settings with external shorteners disabled."""
    return Settings(shortener_providers=[])


@pytest.fixture
def project():
    """A publishable project."""
    return ProjectPayload(
        id="proj_1",
        business_name="Toko Budi!",
        headline="Kue basah enak",
        whatsapp="6281234567890",
        template="warm",
        color_theme="amber",
    )


class TestValidation:
    """Tests for project validation."""

    def test_complete_project(self, project):
        assert missing_project_fields(project) == []

    def test_reports_missing_fields(self):
        """Empty and whitespace-only required fields are reported by wire name."""
        project = ProjectPayload(business_name="Toko", headline="  ")
        assert missing_project_fields(project) == ["headline", "whatsapp"]

    @pytest.mark.asyncio
    async def test_publish_rejects_incomplete_project(self, fake_store, settings):
        store = fake_store()
        with pytest.raises(ProjectValidationError) as exc_info:
            await publish_page(
                ProjectPayload(business_name="Toko"),
                HTML,
                StorageGate(store),
                base_url=BASE_URL,
                settings=settings,
            )

        assert exc_info.value.missing == ["headline", "whatsapp"]
        assert store.put_calls == []


class TestPublishPage:
    """Tests for publish_page."""

    @pytest.mark.asyncio
    async def test_publishes_record(self, fake_store, settings, project):
        """The record is stored under landing:<slug> with camelCase keys."""
        store = fake_store()
        outcome = await publish_page(
            project, HTML, StorageGate(store), base_url=BASE_URL, settings=settings
        )

        assert outcome.success is True
        assert outcome.slug == "toko-budi"
        assert outcome.url == f"{BASE_URL}/p/toko-budi"
        assert outcome.domain == "toko-budi.octomatiz.site"

        record = json.loads(store.data["landing:toko-budi"])
        assert record["html"] == HTML
        assert record["businessName"] == "Toko Budi!"
        assert record["projectId"] == "proj_1"
        assert record["template"] == "warm"
        assert record["colorTheme"] == "amber"
        assert "createdAt" in record
        PageRecord.model_validate(record)

    @pytest.mark.asyncio
    async def test_internal_short_link_persisted(self, fake_store, settings, project):
        """The internal short code is stored and mapped to the slug."""
        store = fake_store()
        outcome = await publish_page(
            project, HTML, StorageGate(store), base_url=BASE_URL, settings=settings
        )

        assert outcome.short_url is not None
        assert outcome.short_url.startswith(f"{BASE_URL}/s/")
        code = outcome.short_url.rsplit("/", 1)[1]
        assert store.data[short_key(code)] == "toko-budi"

    @pytest.mark.asyncio
    async def test_occupied_slug(self, fake_store, settings, project):
        """A taken slug is suffixed."""
        store = fake_store({"landing:toko-budi": "{}"})
        outcome = await publish_page(
            project, HTML, StorageGate(store), base_url=BASE_URL, settings=settings
        )

        assert outcome.slug == "toko-budi-1"
        assert store.data["landing:toko-budi"] == "{}"

    @pytest.mark.asyncio
    async def test_name_without_slug_characters(self, fake_store, settings, project):
        """A name with no usable characters gets the fallback slug."""
        project = project.model_copy(update={"business_name": "!!!"})
        outcome = await publish_page(
            project, HTML, StorageGate(fake_store()), base_url=BASE_URL, settings=settings
        )
        assert outcome.slug == FALLBACK_SLUG

    @pytest.mark.asyncio
    async def test_trailing_slash_in_base_url(self, fake_store, settings, project):
        outcome = await publish_page(
            project,
            HTML,
            StorageGate(fake_store()),
            base_url=BASE_URL + "/",
            settings=settings,
        )
        assert outcome.url == f"{BASE_URL}/p/toko-budi"

    @pytest.mark.asyncio
    async def test_page_ttl_passed_to_store(self, fake_store, project):
        store = fake_store()
        await publish_page(
            project,
            HTML,
            StorageGate(store),
            base_url=BASE_URL,
            settings=Settings(shortener_providers=[], page_ttl_seconds=86400),
        )
        assert all(ttl == 86400 for _, _, ttl in store.put_calls)

    @pytest.mark.asyncio
    async def test_unavailable_storage(self, settings, project):
        outcome = await publish_page(
            project, HTML, StorageGate(None), base_url=BASE_URL, settings=settings
        )

        assert outcome.success is False
        assert outcome.error_code == ErrorCode.KV_UNAVAILABLE
        assert outcome.slug is None

    @pytest.mark.asyncio
    async def test_write_failure(self, fake_store, settings, project):
        """A write failing twice fails the publish without a short link."""
        store = fake_store(put_failures=2)
        outcome = await publish_page(
            project, HTML, StorageGate(store), base_url=BASE_URL, settings=settings
        )

        assert outcome.success is False
        assert outcome.error_code == ErrorCode.KV_WRITE_ERROR
        assert len(store.put_calls) == 2
        assert store.data == {}

    @pytest.mark.asyncio
    async def test_write_retry_succeeds(self, fake_store, settings, project):
        store = fake_store(put_failures=1)
        outcome = await publish_page(
            project, HTML, StorageGate(store), base_url=BASE_URL, settings=settings
        )

        assert outcome.success is True
        assert "landing:toko-budi" in store.data

    @pytest.mark.asyncio
    async def test_short_code_store_failure_omits_link(
        self, fake_store, settings, project
    ):
        """Publishing succeeds without a short link if the mapping cannot be stored."""
        store = fake_store(put_fail_prefix="short:")
        outcome = await publish_page(
            project, HTML, StorageGate(store), base_url=BASE_URL, settings=settings
        )

        assert outcome.success is True
        assert outcome.short_url is None
        assert "landing:toko-budi" in store.data

    @pytest.mark.asyncio
    async def test_shortener_crash_is_swallowed(
        self, fake_store, settings, project, monkeypatch
    ):
        """An unexpected shortener error never fails the publish."""

        async def broken_shorten(*args, **kwargs):
            raise RuntimeError("shortener exploded")

        monkeypatch.setattr("octomatiz.publish.service.shorten", broken_shorten)
        outcome = await publish_page(
            project, HTML, StorageGate(fake_store()), base_url=BASE_URL, settings=settings
        )

        assert outcome.success is True
        assert outcome.short_url is None

    @pytest.mark.asyncio
    @respx.mock
    async def test_external_short_link(self, fake_store, project):
        """An external short URL is returned and nothing is stored for it."""
        respx.get(host="is.gd", path="/create.php").mock(
            return_value=httpx.Response(200, text="https://is.gd/TokoB")
        )
        store = fake_store()

        async with httpx.AsyncClient() as client:
            outcome = await publish_page(
                project,
                HTML,
                StorageGate(store),
                base_url=BASE_URL,
                settings=Settings(shortener_providers=["is.gd"]),
                http_client=client,
            )

        assert outcome.short_url == "https://is.gd/TokoB"
        assert not any(key.startswith("short:") for key in store.data)


class TestResolvePage:
    """Tests for resolve_page."""

    @pytest.mark.asyncio
    async def test_hit(self, fake_store):
        """Stored HTML is served verbatim with a one hour cache directive."""
        record = json.dumps({"html": HTML, "businessName": "Toko Budi"})
        store = fake_store({"landing:toko-budi": record})

        page = await resolve_page("toko-budi", StorageGate(store))

        assert page.status_code == 200
        assert page.html == HTML
        assert page.headers["Cache-Control"] == "public, max-age=3600"
        assert page.found

    @pytest.mark.asyncio
    async def test_absent(self, fake_store):
        page = await resolve_page("unknown-slug", StorageGate(fake_store()))

        assert page.status_code == 404
        assert "unknown-slug" in page.html
        assert not page.found

    @pytest.mark.asyncio
    async def test_record_without_html(self, fake_store):
        store = fake_store({"landing:odd": json.dumps({"businessName": "x"})})
        page = await resolve_page("odd", StorageGate(store))
        assert page.status_code == 404

    @pytest.mark.asyncio
    async def test_record_with_empty_html(self, fake_store):
        """An empty stored page is not served or cached."""
        store = fake_store({"landing:kosong": json.dumps({"html": ""})})
        page = await resolve_page("kosong", StorageGate(store))

        assert page.status_code == 404
        assert not page.found
        assert "Cache-Control" not in page.headers

    @pytest.mark.asyncio
    async def test_non_object_record(self, fake_store):
        store = fake_store({"landing:odd": json.dumps(["<html></html>"])})
        page = await resolve_page("odd", StorageGate(store))
        assert page.status_code == 404

    @pytest.mark.asyncio
    async def test_read_error(self, fake_store):
        store = fake_store(get_error=ConnectionError("down"))
        page = await resolve_page("toko-budi", StorageGate(store))

        assert page.status_code == 503
        assert "Gagal Memuat Halaman" in page.html
        assert "Cache-Control" not in page.headers

    @pytest.mark.asyncio
    async def test_unavailable(self):
        page = await resolve_page("toko-budi", StorageGate(None))

        assert page.status_code == 503
        assert "Layanan Tidak Tersedia" in page.html
