import os
import tempfile
import unittest

from sqlalchemy import func, select

from personal_space.db import (
    MessageRow,
    SettingsRow,
    SqlDbClient,
    StoreError,
)
from personal_space import audio, messages, profile


class SqlDbClientTests(unittest.TestCase):
    """
    Uses SQLite via SQLAlchemy URL for fast/local testing of the SQL client logic.
    """

    def setUp(self):
        self.db = SqlDbClient("sqlite+pysqlite:///:memory:")

    def _count(self, row_type) -> int:
        with self.db.Session() as session:
            return session.execute(select(func.count()).select_from(row_type)).scalar_one()

    def test_profile_created_once_with_defaults(self):
        first = profile.get_profile(self.db)
        second = profile.get_profile(self.db)
        self.assertEqual(first, second)
        self.assertEqual(first.name, "Ahmed Gamal")
        self.assertEqual(first.bio, "Welcome to my space")
        self.assertEqual(self._count(SettingsRow), 1)

    def test_ensure_profile_tolerates_existing_row(self):
        profile.update_profile(self.db, name="Someone")
        self.db.ensure_profile()
        self.db.ensure_profile()
        self.assertEqual(self._count(SettingsRow), 1)
        self.assertEqual(self.db.get_profile().name, "Someone")

    def test_update_profile_coalesces(self):
        profile.update_profile(self.db, avatar="data:image/png;base64,AAAA")
        before = profile.get_profile(self.db)

        profile.update_profile(self.db)
        self.assertEqual(profile.get_profile(self.db), before)

        profile.update_profile(self.db, bio="new")
        after = profile.get_profile(self.db)
        self.assertEqual(after.bio, "new")
        self.assertEqual(after.name, before.name)
        self.assertEqual(after.avatar, before.avatar)
        self.assertIsNone(after.cover)

    def test_messages_listed_oldest_first(self):
        ids = [
            messages.create_message(self.db, f"m{i}").id for i in range(3)
        ]
        listed = messages.list_messages(self.db)
        self.assertEqual([m.id for m in listed], ids)
        self.assertEqual([m.content for m in listed], ["m0", "m1", "m2"])

    def test_update_message_branches(self):
        record = messages.create_message(
            self.db, "body", title="t", artist="a"
        )

        messages.update_message(
            self.db, record.id, {"content": "new", "title": "t2", "artist": "a2"}
        )
        stored = self.db.get_message(record.id)
        self.assertEqual(
            (stored.content, stored.title, stored.artist), ("new", "t2", "a2")
        )

        messages.update_message(self.db, record.id, {"content": "dropped", "artist": "a3"})
        stored = self.db.get_message(record.id)
        self.assertEqual(
            (stored.content, stored.title, stored.artist), ("new", "t2", "a3")
        )

        messages.update_message(self.db, record.id, {"content": "only"})
        stored = self.db.get_message(record.id)
        self.assertEqual(
            (stored.content, stored.title, stored.artist), ("only", "t2", "a3")
        )

    def test_delete_message(self):
        record = messages.create_message(self.db, "bye")
        messages.delete_message(self.db, record.id)
        messages.delete_message(self.db, record.id)
        self.assertIsNone(self.db.get_message(record.id))
        self.assertEqual(self._count(MessageRow), 0)

    def test_audio_roundtrip_through_store(self):
        record = audio.upload_audio(self.db, b"\x01\x02\x03", title="T")
        self.assertEqual(audio.fetch_audio(self.db, record.id), b"\x01\x02\x03")

        text = messages.create_message(self.db, "plain")
        self.assertIsNone(audio.fetch_audio(self.db, text.id))
        self.assertIsNone(audio.fetch_audio(self.db, 404))

    def test_query_failure_raises_store_error(self):
        MessageRow.__table__.drop(self.db.engine)
        with self.assertRaises(StoreError):
            self.db.list_messages()
        with self.assertRaises(StoreError):
            self.db.create_message("x")


class SharedDatabaseTests(unittest.TestCase):
    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.addCleanup(self._tmp.cleanup)
        self.url = f"sqlite+pysqlite:///{os.path.join(self._tmp.name, 'site.db')}"

    def test_second_client_does_not_duplicate_profile(self):
        first = SqlDbClient(self.url)
        second = SqlDbClient(self.url, default_name="Other")
        self.addCleanup(first.engine.dispose)
        self.addCleanup(second.engine.dispose)

        self.assertEqual(profile.get_profile(first).name, "Ahmed Gamal")
        second.ensure_profile()
        self.assertEqual(profile.get_profile(second).name, "Ahmed Gamal")

        with first.Session() as session:
            count = session.execute(
                select(func.count()).select_from(SettingsRow)
            ).scalar_one()
        self.assertEqual(count, 1)


if __name__ == "__main__":
    unittest.main()
