import unittest
from concurrent.futures import Future
from datetime import datetime, timezone

from onedrivemgr.cache import DriveCache
from onedrivemgr.client import OneDriveClient
from onedrivemgr.errors import InternalConsistencyError, MalformedResponseError
from onedrivemgr.models import FileItem, FolderItem, ItemKind, OtherItem, Page
from onedrivemgr.models.decode import (
    decode_drive,
    decode_identity_set,
    decode_item,
    decode_item_reference,
)

PARENT = {"id": "P1", "driveId": "d1", "driveType": "personal", "path": "/drive/root:/Docs"}


class FakeTransport:
    def __init__(self, pages=None) -> None:
        self.pages = pages or {}
        self.calls = []

    def fetch_page_async(self, url: str) -> Future:
        self.calls.append(("fetch_page_async", url))
        future: Future = Future()
        future.set_result(self.pages[url])
        return future


def _folder(item_id: str, **extra) -> dict:
    data = {"id": item_id, "name": item_id, "folder": {"childCount": 0}, "parentReference": PARENT}
    data.update(extra)
    return data


def _file(item_id: str) -> dict:
    return {"id": item_id, "name": f"{item_id}.txt", "file": {"mimeType": "text/plain"},
            "parentReference": PARENT}


class TestDecodeItem(unittest.TestCase):
    def setUp(self) -> None:
        self.transport = FakeTransport()
        self.client = OneDriveClient.from_transport(self.transport)

    def test_decode_file_with_common_fields(self) -> None:
        raw = {
            "id": "F1",
            "name": "report.pdf",
            "size": 1024,
            "eTag": "e1",
            "cTag": "c1",
            "webUrl": "https://onedrive.live.com/x",
            "createdDateTime": "2025-01-01T00:00:00Z",
            "lastModifiedDateTime": "2025-01-02T00:00:00.1234567Z",
            "parentReference": PARENT,
            "file": {"mimeType": "application/pdf", "hashes": {"sha1Hash": "AB"}},
        }

        item = decode_item(raw, client=self.client)

        self.assertIsInstance(item, FileItem)
        self.assertIs(item.kind, ItemKind.FILE)
        self.assertEqual(item.mime_type, "application/pdf")
        self.assertEqual(item.hashes, {"sha1Hash": "AB"})
        self.assertEqual(item.size, 1024)
        self.assertEqual(item.created_time, datetime(2025, 1, 1, tzinfo=timezone.utc))
        self.assertEqual(item.last_modified_time.microsecond, 123456)
        self.assertEqual(item.parent_reference.id, "P1")
        self.assertEqual(item.drive_id, "d1")
        self.assertEqual(item.path, "/Docs/report.pdf")

    def test_decode_folder(self) -> None:
        raw = _folder("D1", folder={"childCount": 7}, specialFolder={"name": "documents"})

        item = decode_item(raw, client=self.client)

        self.assertIsInstance(item, FolderItem)
        self.assertEqual(item.children_count(), 7)
        self.assertTrue(item.is_special())
        self.assertFalse(item.is_root())
        self.assertFalse(item.is_children_fetched())

    def test_decode_root_folder(self) -> None:
        raw = {
            "id": "ABC!101",
            "name": "root",
            "root": {},
            "folder": {"childCount": 2},
            "parentReference": {"driveId": "abc", "driveType": "personal"},
        }

        item = decode_item(raw, client=self.client)

        self.assertTrue(item.is_root())
        self.assertEqual(item.path, "/")
        self.assertIsNone(item.parent_reference)
        self.assertEqual(item.drive_id, "abc")
        self.assertEqual(item.path_pointer.drive_id, "abc")

    def test_decode_business_root_keeps_drive_id(self) -> None:
        drive_id = "b!t18F8ybsHUq1z3LTz8xvZqP8zaSWjkFNhsME-Fepo75dTf9vQKfeRblBZjoSQrd7"
        raw = {
            "id": "01BYE5RZ56Y2GOVW7725BZO354PWSELRRZ",
            "name": "root",
            "root": {},
            "folder": {"childCount": 1},
            "parentReference": {"driveId": drive_id, "driveType": "business"},
        }
        child_raw = {
            "id": "01BYE5RZ6QN3ZWBTUFOFD3GSPGOHDJD36K",
            "name": "Docs",
            "folder": {},
            "parentReference": {
                "driveId": drive_id,
                "id": raw["id"],
                "path": "/drive/root:",
            },
        }

        root = decode_item(raw, client=self.client)
        child = decode_item(child_raw, client=self.client)

        self.assertEqual(root.drive_id, drive_id)
        self.assertEqual(root.path_pointer.drive_id, drive_id)
        self.assertEqual(child.drive_id, root.drive_id)

    def test_decode_path_is_unescaped(self) -> None:
        parent = dict(PARENT, path="/drive/root:/My%20Docs/R%26D")
        raw = {"id": "F1", "name": "a b.txt", "file": {}, "parentReference": parent}

        item = decode_item(raw, client=self.client)

        self.assertEqual(item.path, "/My Docs/R&D/a b.txt")

    def test_decode_root_with_real_parent_fails(self) -> None:
        raw = _folder("R", root={})
        with self.assertRaises(InternalConsistencyError):
            decode_item(raw, client=self.client)

    def test_decode_non_root_folder_without_parent_fails(self) -> None:
        raw = {"id": "D1", "name": "x", "folder": {}}
        with self.assertRaises(InternalConsistencyError):
            decode_item(raw, client=self.client)

    def test_decode_other_variants(self) -> None:
        package = decode_item(
            {"id": "N1", "name": "Notebook", "package": {"type": "oneNote"}, "parentReference": PARENT},
            client=self.client,
        )
        unknown = decode_item({"id": "U1", "name": "u"}, client=self.client)

        self.assertIsInstance(package, OtherItem)
        self.assertEqual(package.facet, "package")
        self.assertIs(package.kind, ItemKind.OTHER)
        self.assertIsNone(unknown.facet)

    def test_decode_rejects_non_objects_and_missing_fields(self) -> None:
        for raw in ("x", 1, None, [], {"name": "no id"}, {"id": "I", "name": 5}):
            with self.subTest(raw=raw):
                with self.assertRaises(MalformedResponseError):
                    decode_item(raw, client=self.client)

    def test_decode_folder_with_inline_children_and_next_link(self) -> None:
        self.transport.pages["https://next/2"] = Page(elements=(_file("B"),))
        raw = _folder(
            "D1",
            children=[_folder("F1"), _file("A")],
            **{"children@odata.nextLink": "https://next/2"},
        )

        item = decode_item(raw, client=self.client)

        self.assertTrue(item.is_children_fetched())
        self.assertEqual([c.id for c in item.all_children()], ["F1", "A", "B"])
        self.assertEqual([c.id for c in item.folder_children()], ["F1"])
        self.assertEqual([c.id for c in item.file_children()], ["A", "B"])
        self.assertEqual(self.transport.calls, [("fetch_page_async", "https://next/2")])

    def test_decode_folder_with_empty_inline_children_is_materialized(self) -> None:
        item = decode_item(_folder("D1", children=[]), client=self.client)
        self.assertTrue(item.is_children_fetched())
        self.assertEqual(item.all_children(), ())

    def test_decode_folder_with_bad_inline_children(self) -> None:
        with self.assertRaises(MalformedResponseError):
            decode_item(_folder("D1", children={}), client=self.client)


class TestDecodeDrive(unittest.TestCase):
    def test_first_decode_wins(self) -> None:
        cache = DriveCache()
        first = decode_drive(
            {
                "id": "b!XYZ",
                "driveType": "business",
                "owner": {"user": {"id": "u1", "displayName": "Ada"}},
                "quota": {"total": 100, "used": 40, "remaining": 60, "state": "normal"},
            },
            cache,
        )
        second = decode_drive({"id": "b!XYZ", "driveType": "business", "quota": {"total": 999}}, cache)

        self.assertIs(first, second)
        self.assertIs(cache.get("b!XYZ"), first)
        self.assertEqual(second.quota.total, 100)
        self.assertEqual(second.quota.remaining, 60)
        self.assertEqual(second.quota.state, "normal")
        self.assertIsNone(second.quota.deleted)
        self.assertEqual(second.owner.user.display_name, "Ada")

    def test_drive_without_quota(self) -> None:
        drive = decode_drive({"id": "d1", "driveType": "personal"}, DriveCache())
        self.assertIsNone(drive.quota)
        self.assertIsNone(drive.owner)
        self.assertEqual(drive.drive_type, "personal")

    def test_drive_equality_is_by_id(self) -> None:
        a = decode_drive({"id": "d1", "quota": {"total": 1}}, DriveCache())
        b = decode_drive({"id": "d1", "quota": {"total": 2}}, DriveCache())
        self.assertIsNot(a, b)
        self.assertEqual(a, b)
        self.assertEqual(len({a, b}), 1)

    def test_drive_rejects_bad_payloads(self) -> None:
        cache = DriveCache()
        for raw in ("x", {"driveType": "personal"}, {"id": "d1", "quota": 5}):
            with self.subTest(raw=raw):
                with self.assertRaises(MalformedResponseError):
                    decode_drive(raw, cache)
        self.assertNotIn("d1", cache)


class TestDecodeReferences(unittest.TestCase):
    def test_item_reference(self) -> None:
        ref = decode_item_reference(PARENT)
        self.assertEqual(ref.id, "P1")
        self.assertEqual(ref.drive_relative_path(), "/Docs")

    def test_identity_set(self) -> None:
        self.assertIsNone(decode_identity_set(None))
        ids = decode_identity_set({"application": {"id": "app", "displayName": "Sync"}})
        self.assertIsNone(ids.user)
        self.assertEqual(ids.application.id, "app")


if __name__ == "__main__":
    unittest.main()
