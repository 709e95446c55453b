"""
Tests for the WhatsApp webhook endpoints.
"""
import pytest


def notification(*messages):
    return {
        "object": "whatsapp_business_account",
        "entry": [
            {
                "id": "WABA_ID",
                "changes": [
                    {
                        "field": "messages",
                        "value": {
                            "messaging_product": "whatsapp",
                            "metadata": {"display_phone_number": "256700000000", "phone_number_id": "1234567890"},
                            "messages": list(messages),
                        },
                    }
                ],
            }
        ],
    }


def text_message(body, sender="256700111222", message_id="wamid.1", **extra):
    return {"from": sender, "id": message_id, "type": "text", "text": {"body": body}, **extra}


class TestVerification:
    def test_challenge_echoed(self, client):
        response = client.get(
            "/webhook/whatsapp",
            params={"hub.mode": "subscribe", "hub.verify_token": "test-verify-token", "hub.challenge": "1158201444"},
        )

        assert response.status_code == 200
        assert response.text == "1158201444"

    def test_wrong_token_forbidden(self, client):
        response = client.get(
            "/webhook/whatsapp",
            params={"hub.mode": "subscribe", "hub.verify_token": "nope", "hub.challenge": "1"},
        )

        assert response.status_code == 403

    def test_missing_params_forbidden(self, client):
        assert client.get("/webhook/whatsapp").status_code == 403


class TestReceive:
    def test_record_payment(self, client, set_intent, fake_db, fake_channel):
        set_intent({"action": "record_payment", "tenant_name": "Kamau", "amount": 500000, "period": "2026-10"})

        response = client.post("/webhook/whatsapp", json=notification(text_message("Kamau paid 500k")))

        assert response.status_code == 200
        assert response.json() == {"status": "received", "scheduled": 1}
        assert len(fake_db.payments) == 1
        assert len(fake_channel.documents) == 1
        reply = fake_channel.texts[-1]
        assert reply["to"] == "256700111222@s.whatsapp.net"
        assert "500,000" in reply["text"]
        assert "Kamau" in reply["text"]

    def test_duplicate_delivery_processed_once(self, client, set_intent, fake_db):
        set_intent({"action": "record_payment", "tenant_name": "Kamau", "amount": 500000, "period": "2026-10"})
        payload = notification(text_message("Kamau paid 500k", message_id="wamid.dup"))

        client.post("/webhook/whatsapp", json=payload)
        second = client.post("/webhook/whatsapp", json=payload)

        assert second.json() == {"status": "received", "scheduled": 0}
        assert len(fake_db.payments) == 1

    def test_group_message_ignored(self, client, llm_client, fake_channel):
        payload = notification(text_message("Kamau paid 500k", group_id="120363012345"))

        response = client.post("/webhook/whatsapp", json=payload)

        assert response.status_code == 200
        assert fake_channel.texts == []
        llm_client.chat.completions.create.assert_not_awaited()

    def test_unregistered_sender(self, client, fake_db, fake_channel):
        client.post("/webhook/whatsapp", json=notification(text_message("Kamau paid 500k", sender="256799000000")))

        assert fake_db.payments == []
        assert "not registered as a landlord" in fake_channel.texts[-1]["text"]

    @pytest.mark.parametrize("body", [b"not json", b'{"entry": "x"}'])
    def test_malformed_payload_acknowledged(self, client, body):
        response = client.post("/webhook/whatsapp", content=body, headers={"Content-Type": "application/json"})

        assert response.status_code == 200
        assert response.json() == {"status": "ignored"}
