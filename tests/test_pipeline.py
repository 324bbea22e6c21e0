import asyncio

import pytest
from aiohttp import web
from aiohttp import test_utils

from exif_lens.core.errors import CORS_MESSAGE, ContentTypeError, FetchError, NetworkError
from exif_lens.core.item_store import ItemStore
from exif_lens.core.models import Item, ItemStatus, SourceKind
from exif_lens.core.pipeline import AnalysisPipeline, fetch_image

from conftest import FakeClient, make_upload, png_bytes

PHOTO = png_bytes(color=(10, 120, 200))


def image_app() -> web.Application:
    async def photo(request):
        return web.Response(body=PHOTO, content_type="image/png")

    async def page(request):
        return web.Response(text="<html></html>", content_type="text/html")

    async def missing(request):
        return web.Response(status=404, text="not here")

    app = web.Application()
    app.router.add_get("/photo.png", photo)
    app.router.add_get("/page", page)
    app.router.add_get("/missing.jpg", missing)
    return app


def run_with_server(scenario):
    """Run `scenario(server)` against a local aiohttp server."""
    async def main():
        async with test_utils.TestServer(image_app()) as server:
            return await scenario(server)
    return asyncio.run(main())


def url_item(url: str) -> Item:
    return Item(id="u1", url=url, source_kind=SourceKind.URL)


class TestFetchImage:
    def test_returns_bytes_and_type(self):
        async def scenario(server):
            return await fetch_image(str(server.make_url("/photo.png")))
        data, content_type = run_with_server(scenario)
        assert data == PHOTO
        assert content_type == "image/png"

    def test_http_error(self):
        async def scenario(server):
            with pytest.raises(FetchError) as info:
                await fetch_image(str(server.make_url("/missing.jpg")))
            return info.value
        assert run_with_server(scenario).status == 404

    def test_unreachable_host(self):
        async def scenario():
            with pytest.raises(NetworkError):
                await fetch_image("http://127.0.0.1:1/photo.png", timeout=5)
        asyncio.run(scenario())


class TestUrlPipeline:
    def run_url(self, path, client):
        async def scenario(server):
            store = ItemStore([url_item(str(server.make_url(path)))])
            pipeline = AnalysisPipeline(store, client)
            await pipeline.run_url(store.get("u1"))
            return store.get("u1")
        return run_with_server(scenario)

    def test_success(self, fake_client, metadata):
        item = self.run_url("/photo.png", fake_client)
        assert item.status is ItemStatus.COMPLETE
        assert item.metadata == metadata
        assert item.error is None
        assert fake_client.calls == [(PHOTO, "image/png")]

    def test_404_becomes_error(self, fake_client):
        item = self.run_url("/missing.jpg", fake_client)
        assert item.status is ItemStatus.ERROR
        assert "404" in item.error
        assert item.metadata is None
        assert fake_client.calls == []

    def test_non_image_is_rejected_before_inference(self, fake_client):
        item = self.run_url("/page", fake_client)
        assert item.status is ItemStatus.ERROR
        assert item.error == str(ContentTypeError("text/html"))
        assert fake_client.calls == []

    def test_network_failure_explains_cors(self, fake_client):
        async def scenario():
            store = ItemStore([url_item("http://127.0.0.1:1/photo.png")])
            await AnalysisPipeline(store, fake_client, fetch_timeout=5).run_url(store.get("u1"))
            return store.get("u1")
        item = asyncio.run(scenario())
        assert item.status is ItemStatus.ERROR
        assert item.error == CORS_MESSAGE


class TestFilePipeline:
    def run_file(self, client, upload=None, **kwargs):
        upload = upload or make_upload()
        item = Item(id="f1", url="/items/f1/image", source_kind=SourceKind.FILE)
        store = ItemStore([item])
        result = asyncio.run(AnalysisPipeline(store, client, **kwargs).run_file(item, upload))
        return store, result

    def test_success(self, fake_client, metadata):
        store, result = self.run_file(fake_client)
        assert result.status is ItemStatus.COMPLETE
        assert store.get("f1").metadata == metadata

    def test_inference_error_message_is_kept(self):
        from exif_lens.core.errors import InferenceError
        client = FakeClient(default=InferenceError("gemini API error: 503"))
        store, _ = self.run_file(client)
        assert store.get("f1").error == "gemini API error: 503"

    def test_unexpected_error_gets_generic_message(self):
        client = FakeClient(default=RuntimeError("socket closed"))
        store, _ = self.run_file(client)
        assert store.get("f1").status is ItemStatus.ERROR
        assert store.get("f1").error == "Failed to analyze file."

    def test_empty_result_is_failure(self):
        client = FakeClient()
        client.default = {}
        store, _ = self.run_file(client)
        assert store.get("f1").status is ItemStatus.ERROR
        assert store.get("f1").metadata is None

    def test_dict_results_are_validated(self, metadata):
        client = FakeClient(default=metadata.to_export())
        store, _ = self.run_file(client)
        assert store.get("f1").metadata == metadata

    def test_partial_dict_is_failure(self):
        client = FakeClient(default={"camera": "Canon EOS R5"})
        store, _ = self.run_file(client)
        assert store.get("f1").status is ItemStatus.ERROR

    def test_encoding_failure(self, fake_client):
        upload = make_upload(data=b"not a picture")
        store, _ = self.run_file(fake_client, upload=upload, max_image_size=256)
        assert store.get("f1").status is ItemStatus.ERROR
        assert fake_client.calls == []

    def test_downscaled_payload_is_jpeg(self, fake_client):
        upload = make_upload(data=png_bytes(size=(1000, 1000)))
        self.run_file(fake_client, upload=upload, max_image_size=256)
        assert fake_client.calls[0][1] == "image/jpeg"

    def test_commit_after_delete_is_noop(self, fake_client):
        item = Item(id="f1", url="/items/f1/image", source_kind=SourceKind.FILE)
        store = ItemStore([item])
        store.delete_items(["f1"])
        result = asyncio.run(AnalysisPipeline(store, fake_client).run_file(item, make_upload()))
        assert result is None
        assert len(store) == 0
