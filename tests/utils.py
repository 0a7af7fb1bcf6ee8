# tests/utils.py
import hashlib
import hmac
import time
from core.clients import EmailClient, GeminiClient, ModerationClient, PaymentClient, VideoRoomClient
from core.context import CurrentUser
from core.errors import ExternalServiceError

TEST_PASSWORD = "secret123"

GUIDE_REPLY = """```json
{
  "difficultyLevel": "advanced",
  "recommendedReaderType": "Readers who enjoy slow, thoughtful science fiction.",
  "suggestedReadingPace": "Two chapters per evening",
  "tips": ["Keep a glossary of invented terms", "  ", "Reread the opening after finishing"]
}
```"""

def as_current(user) -> CurrentUser:
    return CurrentUser.from_user(user)

def login(client, email: str, password: str = TEST_PASSWORD):
    response = client.post("/login", json={"email": email, "password": password})
    assert response.status_code == 200, response.text
    return response.json()

def sign_webhook(payload: bytes, secret: str = "whsec_test", timestamp: int = None) -> str:
    timestamp = timestamp if timestamp is not None else int(time.time())
    signature = hmac.new(secret.encode(), f"{timestamp}.".encode() + payload, hashlib.sha256).hexdigest()
    return f"t={timestamp},v1={signature}"

class FakeEmailClient(EmailClient):
    def __init__(self, fail: bool = False):
        super().__init__(api_key="re_test", from_email="noreply@test.local")
        self.fail = fail
        self.sent = []

    def send(self, to, subject, html):
        if self.fail:
            raise ExternalServiceError(self.service_name, "Email service request failed")
        self.sent.append((to, subject))

class FakeModerationClient(ModerationClient):
    """Flags any content containing one of the blocked words."""
    def __init__(self, blocked=("spoilerbomb",), fail: bool = False):
        super().__init__(api_key="gemini_test")
        self.blocked = blocked
        self.fail = fail

    def classify(self, content):
        if self.fail:
            raise ExternalServiceError(self.service_name, "Moderation service is unavailable")
        return "UNSAFE" if any(word in content.lower() for word in self.blocked) else "SAFE"

class FakeGeminiClient(GeminiClient):
    """Returns canned replies in order and records every prompt."""
    def __init__(self, *replies, fail: bool = False):
        super().__init__(api_key="gemini_test")
        self.replies = list(replies)
        self.fail = fail
        self.prompts = []

    def generate(self, prompt, temperature=0.7, max_output_tokens=1024):
        self.prompts.append(prompt)
        if self.fail:
            raise ExternalServiceError(self.service_name, "AI service is unavailable")
        return self.replies.pop(0)

class FakePaymentClient(PaymentClient):
    """Keeps checkout sessions in memory; webhook signatures are verified for real."""
    def __init__(self):
        super().__init__(secret_key="sk_test", webhook_secret="whsec_test")
        self.sessions = {}
        self._counter = 0

    def create_checkout_session(self, user_id, email, points, amount_cents, success_url, cancel_url):
        self._counter += 1
        session_id = f"cs_test_{self._counter}"
        self.sessions[session_id] = {
            "id": session_id,
            "url": f"https://checkout.test/{session_id}",
            "amount_total": amount_cents,
            "payment_status": "unpaid",
            "metadata": {
                "userId": user_id,
                "userEmail": email,
                "points": str(points),
                "type": "points_purchase",
            },
        }
        return self.sessions[session_id]

    def mark_paid(self, session_id):
        self.sessions[session_id]["payment_status"] = "paid"
        return self.sessions[session_id]

    def retrieve_checkout_session(self, session_id):
        if session_id not in self.sessions:
            raise ExternalServiceError(self.service_name, "Payment provider request failed")
        return self.sessions[session_id]

class FakeVideoClient(VideoRoomClient):
    def __init__(self):
        super().__init__(management_token="hms_test", template_id="tmpl_test")
        self.rooms = []

    def create_room(self, exchange_id, book_title):
        room_id = f"room-{len(self.rooms) + 1}"
        self.rooms.append((room_id, exchange_id, book_title))
        return room_id, f"code-{len(self.rooms)}"

