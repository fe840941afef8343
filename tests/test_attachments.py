"""Attachment visibility, listing filters and content edits."""

import io
import json
import tempfile
import unittest
from pathlib import Path

from app.models import Attachment, Role
from app.schemas.attachment import AttachmentUpdate
from app.services import attachments, users
from app.services.errors import BadRequest, Forbidden, NotFound
from app.services.file_storage import FileStorage
from tests.helpers import DatabaseTestCase, add_user


class TestVisibility(unittest.TestCase):
    def test_unrestricted_files_visible_to_everyone(self) -> None:
        for roles in ({"USER"}, {"ASSISTANT"}, set()):
            self.assertTrue(attachments.can_view(None, roles))
            self.assertTrue(attachments.can_view("USER", roles))

    def test_manager_files(self) -> None:
        self.assertTrue(attachments.can_view("MANAGER", {"MANAGER"}))
        self.assertTrue(attachments.can_view("MANAGER", {"ADMIN"}))
        self.assertFalse(attachments.can_view("MANAGER", {"ASSISTANT"}))

    def test_admin_files(self) -> None:
        self.assertTrue(attachments.can_view("ADMIN", {"ADMIN"}))
        self.assertFalse(attachments.can_view("ADMIN", {"MANAGER"}))


class AttachmentTestCase(DatabaseTestCase):
    def setUp(self) -> None:
        super().setUp()
        self._tmp = tempfile.TemporaryDirectory()
        self.storage = FileStorage(self._tmp.name, max_bytes=1024 * 1024)
        self.owner = add_user(self.db, email="owner@example.com", role=Role.MANAGER)

    def tearDown(self) -> None:
        super().tearDown()
        self._tmp.cleanup()

    def _upload(self, name: str, mime: str, data: bytes = b"data", view_role: str | None = None) -> Attachment:
        attachment = attachments.create_attachment(
            self.db, self.storage, io.BytesIO(data), name, mime, user_id=self.owner.id
        )
        if view_role:
            attachment.view_role = view_role
            self.db.commit()
        return attachment


class TestListAttachments(AttachmentTestCase):
    def setUp(self) -> None:
        super().setUp()
        self._upload("photo.png", "image/png")
        self._upload("scan.pdf", "application/pdf")
        self._upload("song.mp3", "audio/mpeg", view_role="MANAGER")
        self._upload("secret.json", "application/json", view_role="ADMIN")

    def _names(self, roles, **kwargs) -> list[str]:
        page = attachments.list_attachments(self.db, roles, "/api", **kwargs)
        return sorted(item.file_name for item in page.data)

    def test_role_filtering(self) -> None:
        self.assertEqual(self._names({"ASSISTANT"}), ["photo.png", "scan.pdf"])
        self.assertEqual(self._names({"MANAGER"}), ["photo.png", "scan.pdf", "song.mp3"])
        self.assertEqual(len(self._names({"ADMIN"})), 4)

    def test_file_types(self) -> None:
        self.assertEqual(self._names({"ADMIN"}, file_types="image,audio"), ["photo.png", "song.mp3"])
        self.assertEqual(self._names({"ADMIN"}, file_types="pdf"), ["scan.pdf"])

    def test_search_combines_with_file_types(self) -> None:
        self.assertEqual(self._names({"ADMIN"}, search_term="s", search_type="filename", file_types="pdf"), ["scan.pdf"])
        self.assertEqual(self._names({"ADMIN"}, search_term="image", search_type="mime"), ["photo.png"])

    def test_pagination_and_urls(self) -> None:
        page = attachments.list_attachments(self.db, {"ADMIN"}, "/api", page=2, per_page=3, sort_field="id", sort_order="asc")
        self.assertEqual(page.total, 4)
        self.assertEqual(page.total_pages, 2)
        self.assertEqual(len(page.data), 1)
        self.assertTrue(page.data[0].file_url.startswith("/api/file/"))

    def test_unknown_sort_field_falls_back_to_id(self) -> None:
        page = attachments.list_attachments(self.db, {"ADMIN"}, "/api", sort_field="real_path")
        ids = [item.id for item in page.data]
        self.assertEqual(ids, sorted(ids, reverse=True))


class TestAttachmentChanges(AttachmentTestCase):
    def test_get_respects_view_role(self) -> None:
        attachment = self._upload("hidden.txt", "text/plain", view_role="ADMIN")
        with self.assertRaises(Forbidden):
            attachments.get_attachment(self.db, attachment.id, {"MANAGER"})
        self.assertEqual(attachments.get_attachment(self.db, attachment.id, {"ADMIN"}).id, attachment.id)

    def test_update_metadata(self) -> None:
        attachment = self._upload("a.txt", "text/plain")
        updated = attachments.update_attachment(
            self.db, attachment.id, AttachmentUpdate(file_name="b.txt", view_role="MANAGER"), {"MANAGER"}
        )
        self.assertEqual((updated.file_name, updated.view_role), ("b.txt", "MANAGER"))
        cleared = attachments.update_attachment(self.db, attachment.id, AttachmentUpdate(view_role=None), {"MANAGER"})
        self.assertIsNone(cleared.view_role)
        self.assertEqual(cleared.file_name, "b.txt")

    def test_hidden_file_cannot_be_changed(self) -> None:
        attachment = self._upload("secret.json", "application/json", b"{}", view_role="ADMIN")
        manager = {"MANAGER"}
        with self.assertRaises(Forbidden):
            attachments.update_attachment(self.db, attachment.id, AttachmentUpdate(view_role=None), manager)
        with self.assertRaises(Forbidden):
            attachments.update_content(self.db, self.storage, attachment.id, '{"x": 1}', manager)
        with self.assertRaises(Forbidden):
            attachments.replace_file(
                self.db, self.storage, attachment.id, io.BytesIO(b"new"), "x.json", "application/json", manager
            )
        self.db.refresh(attachment)
        self.assertEqual(attachment.view_role, "ADMIN")
        self.assertEqual(Path(attachment.real_path).read_bytes(), b"{}")

    def test_manager_cannot_restrict_to_admin(self) -> None:
        attachment = self._upload("a.txt", "text/plain")
        with self.assertRaises(Forbidden):
            attachments.update_attachment(self.db, attachment.id, AttachmentUpdate(view_role="ADMIN"), {"MANAGER"})
        updated = attachments.update_attachment(self.db, attachment.id, AttachmentUpdate(view_role="ADMIN"), {"ADMIN"})
        self.assertEqual(updated.view_role, "ADMIN")

    def test_delete_removes_file_then_row(self) -> None:
        attachment = self._upload("a.txt", "text/plain")
        path = Path(attachment.real_path)
        attachments.delete_attachment(self.db, self.storage, attachment.id)
        self.assertFalse(path.exists())
        self.assertIsNone(self.db.get(Attachment, attachment.id))
        with self.assertRaises(NotFound):
            attachments.delete_attachment(self.db, self.storage, attachment.id)

    def test_update_content_requires_json(self) -> None:
        text = self._upload("a.txt", "text/plain")
        with self.assertRaises(BadRequest):
            attachments.update_content(self.db, self.storage, text.id, "{}", {"ADMIN"})
        doc = self._upload("a.json", "application/json", b"{}")
        with self.assertRaises(BadRequest):
            attachments.update_content(self.db, self.storage, doc.id, "{broken", {"ADMIN"})
        attachments.update_content(self.db, self.storage, doc.id, '{"ok": true}', {"ADMIN"})
        self.assertEqual(json.loads(Path(doc.real_path).read_text()), {"ok": True})

    def test_replace_file_keeps_id(self) -> None:
        attachment = self._upload("a.txt", "text/plain", b"old")
        old_path = Path(attachment.real_path)
        replaced = attachments.replace_file(
            self.db, self.storage, attachment.id, io.BytesIO(b"brand new"), "b.txt", "text/plain", {"ADMIN"}
        )
        self.assertEqual(replaced.id, attachment.id)
        self.assertEqual(replaced.file_size, 9)
        self.assertFalse(old_path.exists())
        self.assertIsNotNone(attachments.find_by_saved_name(self.db, replaced.saved_name))

    def test_user_with_files_cannot_be_deleted(self) -> None:
        self._upload("a.txt", "text/plain")
        with self.assertRaises(BadRequest):
            users.delete_user(self.db, self.owner.id)
