"""
Tests for the chat widget state machine and its HTTP client.

TEST COVERAGE:
    - One history fetch per opening
    - Optimistic send, confirmation and reply ordering
    - Failed sends stay visible, can be retried or discarded
    - Transcript revision bumps (auto-scroll trigger)
    - HTTP client error mapping

USAGE:
    python -m pytest tests/test_chat_panel.py -v
"""

import unittest
from unittest.mock import Mock

import requests

from loanchat.widget.api_client import ChatApiClient, ChatClientError
from loanchat.widget.chat_panel import ChatPanel, DeliveryStatus, PanelState


def api_message(id_, role, content, created_at="2026-01-01T10:00:00"):
    return {"id": id_, "role": role, "content": content, "created_at": created_at}


class TestChatPanel(unittest.TestCase):

    def setUp(self):
        self.client = Mock(spec=ChatApiClient)
        self.client.fetch_history.return_value = [
            api_message("m1", "user", "Is prepayment allowed?"),
            api_message("m2", "assistant", "Yes."),
        ]
        self.client.submit_turn.return_value = api_message("m4", "assistant", "It is 10.5%.")
        self.panel = ChatPanel(self.client, product_id="P", user_id="U")

    def test_starts_closed(self):
        self.assertEqual(self.panel.state, PanelState.CLOSED)
        self.assertFalse(self.panel.can_send("hi"))

    def test_open_fetches_history_once(self):
        self.panel.open()
        self.panel.open()

        self.client.fetch_history.assert_called_once_with("P", "U")
        self.assertEqual(self.panel.state, PanelState.IDLE)
        self.assertEqual([m.id for m in self.panel.messages], ["m1", "m2"])

    def test_reopening_fetches_again(self):
        self.panel.open()
        self.panel.close()
        self.panel.open()

        self.assertEqual(self.client.fetch_history.call_count, 2)

    def test_history_failure_leaves_panel_usable(self):
        self.client.fetch_history.side_effect = ChatClientError("offline")

        self.panel.open()

        self.assertEqual(self.panel.state, PanelState.IDLE)
        self.assertEqual(self.panel.messages, [])
        self.assertEqual(self.panel.last_error, "offline")

    def test_send_is_optimistic_and_confirmed(self):
        self.panel.open()
        seen = {}

        def submit(message, product_id, user_id, message_id=None):
            # the user's message is already on screen while the request runs
            last = self.panel.messages[-1]
            seen["content"] = last.content
            seen["status"] = last.status
            seen["state"] = self.panel.state
            return api_message("m4", "assistant", "It is 10.5%.")

        self.client.submit_turn.side_effect = submit
        self.panel.draft = "  What's the APR?  "

        reply = self.panel.send()

        self.assertEqual(seen["content"], "What's the APR?")
        self.assertEqual(seen["status"], DeliveryStatus.PENDING)
        self.assertEqual(seen["state"], PanelState.SENDING)

        self.assertEqual(reply.id, "m4")
        self.assertEqual(self.panel.draft, "")
        self.assertEqual(self.panel.state, PanelState.IDLE)
        user_entry, assistant_entry = self.panel.messages[-2:]
        self.assertEqual(user_entry.status, DeliveryStatus.CONFIRMED)
        self.assertEqual(user_entry.role, "user")
        self.assertEqual(assistant_entry.content, "It is 10.5%.")
        self.client.submit_turn.assert_called_once_with(
            "What's the APR?", "P", "U", message_id=user_entry.id
        )

    def test_blank_or_busy_send_is_ignored(self):
        self.panel.open()

        self.assertIsNone(self.panel.send("   "))
        self.panel.state = PanelState.SENDING
        self.assertIsNone(self.panel.send("hello"))

        self.client.submit_turn.assert_not_called()

    def test_failed_send_keeps_message_marked_failed(self):
        self.panel.open()
        self.client.submit_turn.side_effect = ChatClientError("Failed to send message", 500)

        reply = self.panel.send("Hello?")

        self.assertIsNone(reply)
        last = self.panel.messages[-1]
        self.assertEqual(last.content, "Hello?")
        self.assertEqual(last.status, DeliveryStatus.FAILED)
        self.assertEqual(self.panel.state, PanelState.IDLE)
        self.assertEqual(self.panel.last_error, "Failed to send message")

    def test_retry_failed_message(self):
        self.panel.open()
        self.client.submit_turn.side_effect = [
            ChatClientError("boom"),
            api_message("m9", "assistant", "Back online."),
        ]
        self.panel.send("Hello?")
        failed = self.panel.messages[-1]

        reply = self.panel.retry(failed.id)

        self.assertEqual(reply.content, "Back online.")
        self.assertEqual(failed.status, DeliveryStatus.CONFIRMED)
        self.assertEqual(self.panel.messages[-1].id, "m9")
        self.assertIsNone(self.panel.last_error)

    def test_retry_ignores_confirmed_messages(self):
        self.panel.open()
        self.assertIsNone(self.panel.retry("m1"))
        self.client.submit_turn.assert_not_called()

    def test_discard_failed_message(self):
        self.panel.open()
        self.client.submit_turn.side_effect = ChatClientError("boom")
        self.panel.send("Hello?")
        failed = self.panel.messages[-1]

        self.assertFalse(self.panel.discard("m1"))
        self.assertTrue(self.panel.discard(failed.id))
        self.assertEqual([m.id for m in self.panel.messages], ["m1", "m2"])

    def test_failed_messages_survive_reopen(self):
        self.panel.open()
        self.client.submit_turn.side_effect = ChatClientError("boom")
        self.panel.send("Hello?")
        self.panel.close()

        self.panel.open()

        self.assertEqual([m.content for m in self.panel.messages][-1], "Hello?")
        self.assertEqual(self.panel.messages[-1].status, DeliveryStatus.FAILED)

    def test_reopen_drops_failed_message_the_server_recorded(self):
        self.panel.open()
        self.client.submit_turn.side_effect = ChatClientError("boom")
        self.panel.send("Hello?")
        failed = self.panel.messages[-1]
        self.panel.close()
        # the user turn was stored before generation failed
        self.client.fetch_history.return_value = self.client.fetch_history.return_value + [
            api_message(failed.id, "user", "Hello?"),
        ]

        self.panel.open()

        self.assertEqual([m.id for m in self.panel.messages], ["m1", "m2", failed.id])
        self.assertEqual(self.panel.messages[-1].status, DeliveryStatus.CONFIRMED)

    def test_retry_resends_the_same_id(self):
        self.panel.open()
        self.client.submit_turn.side_effect = [
            ChatClientError("boom"),
            api_message("m9", "assistant", "Back online."),
        ]
        self.panel.send("Hello?")
        failed = self.panel.messages[-1]

        self.panel.retry(failed.id)

        ids = [c.kwargs["message_id"] for c in self.client.submit_turn.call_args_list]
        self.assertEqual(ids, [failed.id, failed.id])

    def test_revision_moves_on_every_transcript_change(self):
        start = self.panel.revision
        self.panel.open()
        after_open = self.panel.revision
        self.panel.send("Hi")

        self.assertGreater(after_open, start)
        # optimistic append and reply append
        self.assertEqual(self.panel.revision, after_open + 2)

    def test_close_while_sending_is_ignored(self):
        self.panel.open()
        self.panel.state = PanelState.SENDING
        self.panel.close()
        self.assertEqual(self.panel.state, PanelState.SENDING)


class TestChatApiClient(unittest.TestCase):

    def setUp(self):
        self.session = Mock(spec=requests.Session)
        self.client = ChatApiClient("http://api.local/", timeout=5, session=self.session)

    def _response(self, status=200, payload=None):
        resp = Mock()
        resp.ok = status < 400
        resp.status_code = status
        resp.json.return_value = payload
        return resp

    def test_fetch_history_sends_filters(self):
        self.session.request.return_value = self._response(payload=[])

        self.client.fetch_history("P", None)

        self.session.request.assert_called_once_with(
            "GET", "http://api.local/api/chat", timeout=5, params={"productId": "P"}
        )

    def test_submit_turn_posts_body(self):
        self.session.request.return_value = self._response(payload={"id": "x"})

        data = self.client.submit_turn("Hi", product_id="P", user_id="U")

        self.assertEqual(data, {"id": "x"})
        self.session.request.assert_called_once_with(
            "POST",
            "http://api.local/api/chat",
            timeout=5,
            json={"message": "Hi", "productId": "P", "userId": "U"},
        )

    def test_submit_turn_sends_message_id(self):
        self.session.request.return_value = self._response(payload={"id": "x"})

        self.client.submit_turn("Hi", product_id="P", message_id="client-1")

        self.assertEqual(
            self.session.request.call_args.kwargs["json"],
            {"message": "Hi", "id": "client-1", "productId": "P"},
        )

    def test_error_response_raises_with_server_message(self):
        self.session.request.return_value = self._response(500, {"error": "Database error"})

        with self.assertRaises(ChatClientError) as ctx:
            self.client.submit_turn("Hi")

        self.assertEqual(str(ctx.exception), "Database error")
        self.assertEqual(ctx.exception.status_code, 500)

    def test_connection_error_raises(self):
        self.session.request.side_effect = requests.ConnectionError("refused")

        with self.assertRaises(ChatClientError):
            self.client.fetch_history("P")

    def test_list_products_drops_empty_filters(self):
        self.session.request.return_value = self._response(payload={"data": [{"id": "a"}]})

        products = self.client.list_products(search="", income=20000)

        self.assertEqual(products, [{"id": "a"}])
        self.assertEqual(self.session.request.call_args.kwargs["params"], {"income": 20000})


if __name__ == "__main__":
    unittest.main()
