import unittest
from concurrent.futures import Future

from onedrivemgr.cache import DriveCache
from onedrivemgr.client import OneDriveClient
from onedrivemgr.errors import (
    InternalConsistencyError,
    MalformedResponseError,
    NotFoundError,
    RateLimitError,
)
from onedrivemgr.models import FileItem, FolderItem, Page

ROOT = {
    "id": "ABC!101",
    "name": "root",
    "root": {},
    "folder": {"childCount": 3},
    "parentReference": {"driveId": "abc", "driveType": "personal"},
}
PARENT = {"id": "ABC!101", "driveId": "abc", "path": "/drive/root:"}


def _folder(item_id: str, child_count: int = 0) -> dict:
    return {"id": item_id, "name": item_id, "folder": {"childCount": child_count},
            "parentReference": PARENT}


def _file(item_id: str) -> dict:
    return {"id": item_id, "name": item_id, "file": {}, "parentReference": PARENT}


class FakeTransport:
    def __init__(self) -> None:
        self.calls = []
        self.json = {}
        self.pages = {}
        self.closed = False

    def get_json(self, api: str):
        self.calls.append(("get_json", api))
        return self._answer(self.json[api])

    def post_json(self, api: str, body):
        self.calls.append(("post_json", api, body))
        return self._answer(self.json[api])

    def fetch_page(self, api: str) -> Page:
        self.calls.append(("fetch_page", api))
        return self._answer(self.pages[api])

    def fetch_page_async(self, api: str) -> Future:
        self.calls.append(("fetch_page_async", api))
        future: Future = Future()
        try:
            future.set_result(self._answer(self.pages[api]))
        except Exception as exc:
            future.set_exception(exc)
        return future

    def close(self) -> None:
        self.closed = True

    @staticmethod
    def _answer(value):
        if isinstance(value, list):
            value = value.pop(0)
        if isinstance(value, BaseException):
            raise value
        return value


class TestOneDriveClientItems(unittest.TestCase):
    def setUp(self) -> None:
        self.transport = FakeTransport()
        self.client = OneDriveClient.from_transport(self.transport)

    def test_get_root_folder(self) -> None:
        self.transport.json["/me/drive/root"] = ROOT

        root = self.client.get_root_folder()

        self.assertTrue(root.is_root())
        self.assertEqual(root.path, "/")
        self.assertEqual(root.children_count(), 3)
        self.assertFalse(root.is_children_fetched())

    def test_get_root_folder_rejects_non_root(self) -> None:
        self.transport.json["/me/drive/root"] = _folder("X")
        with self.assertRaises(MalformedResponseError):
            self.client.get_root_folder()

    def test_lazy_children_across_pages(self) -> None:
        self.transport.json["/me/drive/root"] = ROOT
        self.transport.pages["/me/drive/items/ABC!101/children"] = Page(
            elements=(_folder("A"), _file("x.txt")), next_link="https://graph/next?token=2"
        )
        self.transport.pages["https://graph/next?token=2"] = Page(elements=(_file("y.txt"),))

        root = self.client.get_root_folder()
        self.assertEqual([c.id for c in root.all_children()], ["A", "x.txt", "y.txt"])
        self.assertEqual([c.id for c in root.folder_children()], ["A"])
        self.assertEqual([c.id for c in root.file_children()], ["x.txt", "y.txt"])

        # A second access is served from the published snapshot.
        root.all_children()
        self.assertEqual(
            self.transport.calls,
            [
                ("get_json", "/me/drive/root"),
                ("fetch_page", "/me/drive/items/ABC!101/children"),
                ("fetch_page_async", "https://graph/next?token=2"),
            ],
        )
        child = root.folder_children()[0]
        self.assertEqual(child.path, "/A")
        self.assertEqual(child.parent_reference.id, "ABC!101")

    def test_first_page_error_leaves_folder_unfetched_and_retry_refetches(self) -> None:
        self.transport.json["/me/drive/root"] = ROOT
        self.transport.pages["/me/drive/items/ABC!101/children"] = [
            RateLimitError("throttled"),
            Page(elements=(_file("x.txt"),)),
        ]
        root = self.client.get_root_folder()

        with self.assertRaises(RateLimitError):
            root.all_children()
        self.assertFalse(root.is_children_fetched())

        self.assertEqual([c.id for c in root.all_children()], ["x.txt"])
        fetches = [c for c in self.transport.calls if c[0] == "fetch_page"]
        self.assertEqual(len(fetches), 2)

    def test_later_page_error_publishes_nothing(self) -> None:
        self.transport.json["/me/drive/items/D1"] = _folder("D1")
        self.transport.pages["/me/drive/items/D1/children"] = Page(
            elements=(_file("a"),), next_link="https://graph/next"
        )
        self.transport.pages["https://graph/next"] = NotFoundError("expired token")

        folder = self.client.get_item("D1")
        with self.assertRaises(NotFoundError):
            folder.all_children()
        self.assertFalse(folder.is_children_fetched())

    def test_get_item_with_expanded_children(self) -> None:
        raw = dict(_folder("D1", child_count=1), children=[_file("a")])
        self.transport.json["/me/drive/items/D1?$expand=children"] = raw

        folder = self.client.get_item("D1", expand_children=True)

        self.assertTrue(folder.is_children_fetched())
        self.assertEqual([c.id for c in folder.all_children()], ["a"])
        self.assertEqual(len(self.transport.calls), 1)

    def test_get_item_rejects_empty_id(self) -> None:
        with self.assertRaises(ValueError):
            self.client.get_item("")

    def test_get_item_by_path(self) -> None:
        self.transport.json["/me/drive/root:/Docs/a.txt"] = _file("a.txt")

        item = self.client.get_item_by_path("/Docs/a.txt")

        self.assertIsInstance(item, FileItem)

    def test_refresh_updates_in_place_and_drops_children(self) -> None:
        self.transport.json["/me/drive/items/D1"] = [_folder("D1", 1), _folder("D1", 4)]
        self.transport.pages["/me/drive/items/D1/children"] = Page(elements=(_file("a"),))

        folder = self.client.get_item("D1")
        folder.all_children()
        self.assertTrue(folder.is_children_fetched())

        folder.refresh()

        self.assertFalse(folder.is_children_fetched())
        self.assertEqual(folder.children_count(), 4)

    def test_refresh_with_changed_variant_fails(self) -> None:
        self.transport.json["/me/drive/items/D1"] = [_folder("D1"), dict(_file("D1"))]

        folder = self.client.get_item("D1")
        with self.assertRaises(InternalConsistencyError):
            folder.refresh()

    def test_create_folder(self) -> None:
        self.transport.json["/me/drive/items/P1/children"] = _folder("NEW")

        created = self.client.create_folder("P1", "NEW")

        self.assertIsInstance(created, FolderItem)
        _, api, body = self.transport.calls[0]
        self.assertEqual(api, "/me/drive/items/P1/children")
        self.assertEqual(
            body,
            {"name": "NEW", "folder": {}, "@microsoft.graph.conflictBehavior": "fail"},
        )

    def test_create_folder_rejects_blank_name(self) -> None:
        with self.assertRaises(ValueError):
            self.client.create_folder("P1", "  ")
        self.assertEqual(self.transport.calls, [])


class TestOneDriveClientDrives(unittest.TestCase):
    def setUp(self) -> None:
        self.transport = FakeTransport()
        self.cache = DriveCache()
        self.client = OneDriveClient.from_transport(self.transport, drive_cache=self.cache)

    def test_default_drive_is_canonical(self) -> None:
        self.transport.json["/me/drive"] = [
            {"id": "abc", "driveType": "personal", "quota": {"total": 10}},
            {"id": "abc", "driveType": "personal", "quota": {"total": 20}},
        ]

        first = self.client.get_default_drive()
        second = self.client.get_default_drive()

        self.assertIs(first, second)
        self.assertEqual(second.quota.total, 10)
        self.assertIs(self.client.cached_drive("abc"), first)
        self.assertIs(self.client.drive_cache, self.cache)

    def test_list_drives_follows_next_link(self) -> None:
        self.transport.pages["/me/drives"] = Page(elements=({"id": "a"},), next_link="https://graph/d2")
        self.transport.pages["https://graph/d2"] = Page(elements=({"id": "b"}, {"id": "a"}))

        drives = self.client.list_drives()

        self.assertEqual([d.id for d in drives], ["a", "b", "a"])
        self.assertIs(drives[0], drives[2])
        self.assertEqual(len(self.cache), 2)

    def test_cached_drive_unknown(self) -> None:
        self.assertIsNone(self.client.cached_drive("nope"))

    def test_context_manager_closes_transport(self) -> None:
        with self.client:
            pass
        self.assertTrue(self.transport.closed)


if __name__ == "__main__":
    unittest.main()
