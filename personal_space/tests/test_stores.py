import os
import unittest
from concurrent.futures import ThreadPoolExecutor

from personal_space import audio, messages, profile
from personal_space.auth import is_admin
from personal_space.config import get_settings
from personal_space.db import InMemoryDbClient


class ProfileStoreTests(unittest.TestCase):
    def setUp(self):
        self.db = InMemoryDbClient(default_name="Me", default_bio="Hi")

    def test_concurrent_first_reads_create_one_row(self):
        with ThreadPoolExecutor(max_workers=8) as pool:
            results = list(pool.map(lambda _: profile.get_profile(self.db), range(32)))
        self.assertTrue(all(r == results[0] for r in results))
        self.assertEqual(results[0].name, "Me")
        self.assertEqual(self.db.writes, 1)

    def test_update_without_fields_keeps_row(self):
        before = profile.get_profile(self.db)
        profile.update_profile(self.db)
        self.assertEqual(profile.get_profile(self.db), before)

    def test_defaults_come_from_settings(self):
        settings = get_settings()
        stored = profile.get_profile(InMemoryDbClient())
        self.assertEqual(stored.name, settings.default_profile_name)
        self.assertEqual(stored.bio, settings.default_profile_bio)

    def test_update_creates_row_first(self):
        profile.update_profile(self.db, cover="https://example.test/c.png")
        stored = profile.get_profile(self.db)
        self.assertEqual(stored.cover, "https://example.test/c.png")
        self.assertEqual(stored.bio, "Hi")


class MessageStoreTests(unittest.TestCase):
    def setUp(self):
        self.db = InMemoryDbClient()

    def test_create_requires_content(self):
        for content in (None, ""):
            with self.assertRaises(ValueError):
                messages.create_message(self.db, content)
        self.assertEqual(self.db.messages, {})

    def test_missing_type_defaults_to_text(self):
        record = messages.create_message(self.db, "hi", None)
        self.assertEqual(record.type, "text")

    def test_update_and_delete_require_id(self):
        with self.assertRaises(ValueError):
            messages.update_message(self.db, None, {"content": "x"})
        with self.assertRaises(ValueError):
            messages.delete_message(self.db, 0)

    def test_plan_message_update(self):
        cases = [
            ({"content": "c", "title": "t", "artist": "a"},
             {"content": "c", "title": "t", "artist": "a"}),
            ({"title": "X"}, {"title": "X"}),
            ({"content": "c", "title": "t"}, {"title": "t"}),
            ({"artist": None}, {"artist": None}),
            ({"content": "c"}, {"content": "c"}),
            ({"content": ""}, {}),
            ({}, {}),
        ]
        for fields, expected in cases:
            self.assertEqual(messages.plan_message_update(fields), expected, fields)

    def test_update_title_leaves_other_fields(self):
        record = messages.create_message(self.db, "body", title="t", artist="a")
        messages.update_message(self.db, record.id, {"title": "X"})
        stored = self.db.get_message(record.id)
        self.assertEqual((stored.content, stored.title, stored.artist), ("body", "X", "a"))

    def test_listing_replaces_audio_content(self):
        payload = os.urandom(256)
        audio.upload_audio(self.db, payload)
        messages.create_message(self.db, "text body")

        listed = messages.list_messages(self.db)
        self.assertEqual(
            [m.content for m in listed],
            [messages.AUDIO_CONTENT_PLACEHOLDER, "text body"],
        )
        full = messages.list_messages(self.db, include_full_content=True)
        self.assertEqual(audio.decode_audio(full[0].content), payload)
        # The stored record is untouched by the projection.
        self.assertTrue(self.db.messages[full[0].id].content.startswith("data:"))


class AudioCodecTests(unittest.TestCase):
    def test_roundtrip(self):
        for raw in (b"\x00", b"\x01\x02\x03", os.urandom(1000)):
            self.assertEqual(audio.decode_audio(audio.encode_audio(raw)), raw)

    def test_encode_adds_prefix(self):
        self.assertEqual(audio.encode_audio(b"\x01\x02\x03"), "data:audio/mpeg;base64,AQID")

    def test_encode_rejects_empty(self):
        with self.assertRaises(ValueError):
            audio.encode_audio(b"")

    def test_decode_accepts_bare_base64(self):
        self.assertEqual(audio.decode_audio("AQID"), b"\x01\x02\x03")
        self.assertEqual(audio.decode_audio("data:audio/wav;base64,AQID"), b"\x01\x02\x03")

    def test_upload_defaults(self):
        db = InMemoryDbClient()
        record = audio.upload_audio(db, b"\x01")
        self.assertEqual(record.type, "audio")
        self.assertEqual(record.title, "Untitled")
        self.assertEqual(record.artist, "Unknown Artist")


class AdminGateTests(unittest.TestCase):
    def test_is_admin(self):
        self.assertTrue(is_admin("secret", "secret"))
        self.assertFalse(is_admin("Secret", "secret"))
        self.assertFalse(is_admin(None, "secret"))
        self.assertFalse(is_admin("", ""))
        self.assertFalse(is_admin("anything", None))


if __name__ == "__main__":
    unittest.main()
