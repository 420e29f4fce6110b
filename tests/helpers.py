TEST_PASSWORD = "TestPassword123"


async def login(client, email: str, password: str = TEST_PASSWORD):
    return await client.post("/api/auth/login", json={"email": email, "password": password})


def bearer(access_token: str) -> dict:
    return {"Authorization": f"Bearer {access_token}"}


class FakeMailer:
    """Records outgoing emails instead of talking to SMTP."""

    def __init__(self):
        self.sent = []
        self.fail = False

    def _record(self, kind, **kwargs):
        if self.fail:
            raise ConnectionRefusedError("SMTP server unavailable")
        self.sent.append({"kind": kind, **kwargs})

    def send_welcome_email(self, to_email, first_name):
        self._record("welcome", to_email=to_email, first_name=first_name)

    def send_password_reset_email(self, to_email, reset_token, first_name):
        self._record("reset", to_email=to_email, reset_token=reset_token, first_name=first_name)

    def last_reset_token(self):
        return [mail for mail in self.sent if mail["kind"] == "reset"][-1]["reset_token"]
