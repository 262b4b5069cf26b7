"""
Unit tests for the chat session controller
"""

import base64
import unittest
from unittest.mock import AsyncMock, Mock

import google.generativeai as genai
from google.api_core.exceptions import ResourceExhausted, ServiceUnavailable
from google.generativeai.types import BlockedPromptException, StopCandidateException

from fakes import FakeBackend
from mentor.exceptions import SessionInitError
from mentor.keys import KeyRotator
from mentor.prompts import CRITICAL_ERROR_MESSAGE, SAFETY_BLOCKED_MESSAGE
from mentor.session import ChatSessionController

KEYS = ['key-0001', 'key-0002', 'key-0003']


class TestChatSessionController(unittest.IsolatedAsyncioTestCase):
    """Test cases for the ChatSessionController class"""

    def make_controller(self, outcomes, **backend_kwargs):
        self.backend = FakeBackend(outcomes, **backend_kwargs)
        self.sleep = AsyncMock()
        self.rotator = KeyRotator(KEYS, client_factory=self.backend.client_factory)
        self.rotator.advance = Mock(wraps=self.rotator.advance)
        return ChatSessionController(
            self.rotator,
            system_instruction="Seja o Mentor.",
            retry_delay=0.8,
            sleep=self.sleep,
        )

    async def test_first_attempt_success_does_not_rotate(self):
        controller = self.make_controller(["  Faça agora.  "])

        reply = await controller.send_turn("Estou travado.")

        self.assertEqual(reply, "Faça agora.")
        self.rotator.advance.assert_not_called()
        self.sleep.assert_not_called()
        self.assertTrue(controller.is_active)
        self.assertEqual(self.backend.started_histories, [[]])
        self.assertEqual(self.backend.system_instructions, ["Seja o Mentor."])

    async def test_session_is_reused_between_turns(self):
        controller = self.make_controller(["um", "dois"])

        await controller.send_turn("primeira")
        await controller.send_turn("segunda")

        self.assertEqual(len(self.backend.started_histories), 1)
        self.assertEqual(self.backend.sent, ["primeira", "segunda"])

    async def test_blocked_prompt_short_circuits(self):
        controller = self.make_controller([BlockedPromptException("blocked")])

        reply = await controller.send_turn("algo extremo")

        self.assertEqual(reply, SAFETY_BLOCKED_MESSAGE)
        self.rotator.advance.assert_not_called()
        self.sleep.assert_not_called()
        self.assertEqual(len(self.backend.sent), 1)
        self.assertEqual(self.rotator.current_key_index, 0)

    async def test_safety_stopped_candidate_short_circuits(self):
        candidate = genai.protos.Candidate(finish_reason=genai.protos.Candidate.FinishReason.SAFETY)
        controller = self.make_controller([StopCandidateException(candidate)])

        reply = await controller.send_turn("algo extremo")

        self.assertEqual(reply, SAFETY_BLOCKED_MESSAGE)
        self.rotator.advance.assert_not_called()

    async def test_persistent_failure_tries_every_key_once(self):
        controller = self.make_controller([ResourceExhausted("quota")] * 3)

        reply = await controller.send_turn("olá")

        self.assertEqual(reply, CRITICAL_ERROR_MESSAGE)
        self.assertEqual(len(self.backend.started_histories), 3)
        self.assertEqual(self.backend.keys_used, KEYS)
        self.assertEqual(self.rotator.advance.call_count, 3)
        self.assertEqual(self.sleep.await_count, 2)
        self.sleep.assert_awaited_with(0.8)
        self.assertEqual(self.rotator.current_key_index, 0)
        self.assertFalse(controller.is_active)

    async def test_recovers_on_next_key(self):
        controller = self.make_controller([ServiceUnavailable("overloaded"), "resposta"])

        reply = await controller.send_turn("olá")

        self.assertEqual(reply, "resposta")
        self.assertEqual(self.rotator.current_key_index, 1)
        self.assertEqual(self.backend.keys_used, KEYS[:2])
        self.sleep.assert_awaited_once_with(0.8)

    async def test_history_is_replayed_after_rotation(self):
        controller = self.make_controller(["primeira resposta", ResourceExhausted("quota"), "segunda resposta"])

        await controller.send_turn("oi")
        reply = await controller.send_turn("e agora?")

        self.assertEqual(reply, "segunda resposta")
        self.assertEqual(
            self.backend.started_histories[1],
            [("user", "oi"), ("model", "primeira resposta")],
        )

    async def test_unreadable_history_degrades_to_empty(self):
        controller = self.make_controller([RuntimeError("boom"), "ok"], broken_history=True)

        reply = await controller.send_turn("oi")

        self.assertEqual(reply, "ok")
        self.assertEqual(self.backend.started_histories, [[], []])

    async def test_image_attachment_is_sent_inline(self):
        from mentor.ai_client_gemini import ImagePart

        controller = self.make_controller(["vejo um gráfico"])
        image = ImagePart(mime_type="image/png", data=base64.b64encode(b"png-bytes").decode("ascii"))

        await controller.send_turn("o que é isto?", image)

        self.assertEqual(
            self.backend.sent[0],
            ["o que é isto?", {"inline_data": {"mime_type": "image/png", "data": b"png-bytes"}}],
        )

    async def test_client_construction_failure_rotates(self):
        backend = FakeBackend(["ok"])
        factory = Mock(side_effect=[RuntimeError("bad key"), backend.client_factory('key-0002')])
        rotator = KeyRotator(KEYS, client_factory=factory)
        sleep = AsyncMock()
        controller = ChatSessionController(rotator, system_instruction="x", sleep=sleep)

        reply = await controller.send_turn("oi")

        self.assertEqual(reply, "ok")
        self.assertEqual(rotator.current_key_index, 1)
        sleep.assert_awaited_once()

    async def test_history_survives_a_failed_initialization(self):
        backend = FakeBackend(["r1", ResourceExhausted("quota"), "r2"])

        def factory(api_key):
            if api_key == 'key-0002':
                raise RuntimeError("bad key")
            return backend.client_factory(api_key)

        rotator = KeyRotator(KEYS, client_factory=factory)
        controller = ChatSessionController(rotator, system_instruction="x", sleep=AsyncMock())

        await controller.send_turn("oi")
        reply = await controller.send_turn("de novo")

        self.assertEqual(reply, "r2")
        self.assertEqual(rotator.current_key_index, 2)
        self.assertEqual(backend.started_histories[-1], [("user", "oi"), ("model", "r1")])

    async def test_session_init_error_rotates_and_retries(self):
        backend = FakeBackend(["ok"])
        broken_client = Mock()
        broken_client.chat_model.return_value.start_chat.return_value = None
        factory = Mock(side_effect=[broken_client, backend.client_factory('key-0002')])
        rotator = KeyRotator(KEYS, client_factory=factory)
        rotator.advance = Mock(wraps=rotator.advance)
        sleep = AsyncMock()
        controller = ChatSessionController(rotator, system_instruction="x", retry_delay=0.8, sleep=sleep)

        reply = await controller.send_turn("oi")

        self.assertEqual(reply, "ok")
        rotator.advance.assert_called_once()
        sleep.assert_awaited_once_with(0.8)
        self.assertEqual(rotator.current_key_index, 1)


class TestSessionLifecycle(unittest.TestCase):
    """Synchronous state transitions"""

    def setUp(self):
        self.backend = FakeBackend()
        self.rotator = KeyRotator(KEYS, client_factory=self.backend.client_factory)
        self.controller = ChatSessionController(self.rotator, system_instruction="x")

    def test_initialize_and_reset(self):
        self.assertFalse(self.controller.is_active)

        self.controller.initialize([("user", "oi")])
        self.assertTrue(self.controller.is_active)
        self.assertEqual(self.backend.started_histories, [[("user", "oi")]])

        self.controller.reset()
        self.assertFalse(self.controller.is_active)

    def test_initialize_without_session_raises(self):
        client = Mock()
        client.chat_model.return_value.start_chat.return_value = None
        rotator = KeyRotator(KEYS, client_factory=Mock(return_value=client))
        controller = ChatSessionController(rotator, system_instruction="x")

        with self.assertRaises(SessionInitError):
            controller.initialize()

    def test_capture_history_without_session(self):
        self.assertIsNone(self.controller.capture_history())

    def test_capture_history_returns_copy(self):
        self.controller.initialize([("user", "oi")])
        captured = self.controller.capture_history()

        self.assertEqual(captured, [("user", "oi")])
        self.assertIsNot(captured, self.controller.session.history)


if __name__ == '__main__':
    unittest.main()
