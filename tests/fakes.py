"""
In-memory stand-ins for the parts of AsyncOpenAI the app calls.
"""
from pathlib import Path
from types import SimpleNamespace

import httpx
import openai

PAGE_SIZE = 20


def api_error(message: str = "boom", status_code: int = 500) -> openai.APIStatusError:
    request = httpx.Request("POST", "https://api.openai.com/v1/test")
    response = httpx.Response(status_code, request=request, headers={"x-request-id": "req_123"})
    return openai.APIStatusError(message, response=response, body={"error": {"message": message}})


class FakePaginator:
    """Like the SDK paginator: `.data` is the first page, `async for` walks every page."""

    def __init__(self, items, error=None):
        self.items = items
        self.error = error
        self.data = items[:PAGE_SIZE]

    def __aiter__(self):
        return self._iterate()

    async def _iterate(self):
        if self.error:
            raise self.error
        for item in self.items:
            yield item


class FakeResponses:
    def __init__(self):
        self.calls = []
        self.output_text = "An answer."
        self.error = None

    async def create(self, **kwargs):
        self.calls.append(kwargs)
        if self.error:
            raise self.error
        return SimpleNamespace(output_text=self.output_text)


class FakeFiles:
    """Stands in for client.files; records how many staged files exist at upload time."""

    def __init__(self, upload_dir: Path):
        self.upload_dir = upload_dir
        self.uploaded = []
        self.fail_names = set()
        self.max_staged_seen = 0
        self.deleted = []

    async def create(self, file, purpose):
        name, fh = file
        staged_now = len(list(self.upload_dir.iterdir()))
        self.max_staged_seen = max(self.max_staged_seen, staged_now)
        if name in self.fail_names:
            raise api_error(f"could not upload {name}", 400)
        fh.read()
        file_id = f"file-{len(self.uploaded) + 1}"
        self.uploaded.append((file_id, name, purpose))
        return SimpleNamespace(id=file_id)

    async def delete(self, file_id):
        self.deleted.append(file_id)
        return SimpleNamespace(id=file_id, deleted=True)


class FakeVectorStoreFiles:
    def __init__(self, stores):
        self.stores = stores
        self.error = None
        self.list_calls = []

    def list(self, vector_store_id):
        self.list_calls.append(vector_store_id)
        entries = self.stores.get(vector_store_id, [])
        return FakePaginator([SimpleNamespace(id=i, status=s) for i, s in entries], self.error)


class FakeFileBatches:
    def __init__(self, stores):
        self.stores = stores
        self.calls = []
        self.failed_ids = {}
        self.error = None

    async def create_and_poll(self, vector_store_id, file_ids):
        self.calls.append((vector_store_id, list(file_ids)))
        if self.error:
            raise self.error
        failed = [f for f in file_ids if f in self.failed_ids]
        for file_id in file_ids:
            status = "failed" if file_id in self.failed_ids else "completed"
            self.stores.setdefault(vector_store_id, []).append((file_id, status))
        counts = SimpleNamespace(
            completed=len(file_ids) - len(failed), failed=len(failed),
            in_progress=0, cancelled=0, total=len(file_ids),
        )
        return SimpleNamespace(id="vsfb_1", status="completed", file_counts=counts)

    def list_files(self, batch_id, vector_store_id, filter=None):
        return FakePaginator([
            SimpleNamespace(id=file_id, last_error=SimpleNamespace(code="invalid_file", message=message))
            for file_id, message in self.failed_ids.items()
        ])


class FakeVectorStores:
    def __init__(self):
        self.stores = {}
        self.create_calls = []
        self.error = None
        self.files = FakeVectorStoreFiles(self.stores)
        self.file_batches = FakeFileBatches(self.stores)

    async def create(self, name):
        self.create_calls.append(name)
        if self.error:
            raise self.error
        store_id = f"vs_test{len(self.create_calls)}"
        self.stores[store_id] = []
        return SimpleNamespace(id=store_id, name=name)

    async def retrieve(self, vector_store_id):
        entries = self.stores.get(vector_store_id, [])
        counts = SimpleNamespace(
            total=len(entries),
            completed=sum(1 for _, s in entries if s == "completed"),
            failed=sum(1 for _, s in entries if s == "failed"),
        )
        return SimpleNamespace(id=vector_store_id, status="completed", file_counts=counts)


class FakeModels:
    def __init__(self):
        self.error = None

    def list(self):
        return FakePaginator([SimpleNamespace(id="gpt-4o-mini"), SimpleNamespace(id="gpt-4o")], self.error)


class FakeOpenAI:
    def __init__(self, upload_dir: Path):
        self.responses = FakeResponses()
        self.files = FakeFiles(upload_dir)
        self.vector_stores = FakeVectorStores()
        self.models = FakeModels()

    def provider_calls(self) -> int:
        return (
            len(self.responses.calls)
            + len(self.files.uploaded)
            + len(self.vector_stores.create_calls)
            + len(self.vector_stores.file_batches.calls)
            + len(self.vector_stores.files.list_calls)
        )


