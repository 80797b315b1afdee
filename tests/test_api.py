"""
Tests for the HTTP Service
==========================
Routes, error bodies, rate limiting, health and metrics.
"""


def send(client, email="a@example.com"):
    return client.post("/api/send-otp", json={"email": email})


def verify(client, otp, email="a@example.com"):
    return client.post("/api/verify-otp", json={"email": email, "otp": otp})


class TestSendOTP:

    def test_send_otp(self, client, dispatcher, store):
        """Issuing stores a record and mails the same code."""
        response = send(client)

        assert response.status_code == 200
        data = response.json()
        assert data["success"] is True
        assert data["message"] == "OTP sent to your email"
        assert data["email"] == "a@example.com"

        to, code, _ = dispatcher.sent[-1]
        assert to == "a@example.com"
        assert store.get("a@example.com").code == code
        assert data["debug"]["otp"] == code
        assert data["debug"]["expires_in"] == 300
        assert data["debug"]["email_sent"] is True

    def test_email_is_stripped(self, client, store):
        response = send(client, "  a@example.com ")

        assert response.status_code == 200
        assert "a@example.com" in store

    def test_missing_email(self, client):
        response = client.post("/api/send-otp", json={})

        assert response.status_code == 400
        assert response.json()["error"] == "Email is required"
        assert response.json()["code"] == "INVALID_REQUEST"

    def test_invalid_email(self, client, store):
        response = send(client, "not-an-email")

        assert response.status_code == 400
        assert response.json()["error"] == "Invalid email format"
        assert len(store) == 0

    def test_malformed_body(self, client):
        response = client.post(
            "/api/send-otp",
            content=b"not json",
            headers={"Content-Type": "application/json"},
        )

        assert response.status_code == 400
        assert response.json()["code"] == "INVALID_REQUEST"

    def test_dispatch_failure_keeps_code(self, make_client, failing_dispatcher):
        """A failed send still answers 200 and the code stays valid."""
        client = make_client(dispatcher=failing_dispatcher)

        response = send(client)

        assert response.status_code == 200
        data = response.json()
        assert data["message"] == "OTP generated (check server console)"
        assert data["debug"]["email_sent"] is False
        assert data["debug"]["email_error"] == "connection refused"

        assert verify(client, data["debug"]["otp"]).status_code == 200

    def test_production_hides_debug(self, make_client):
        from mailotp_core.config import Settings

        client = make_client(settings=Settings(environment="production", otp_rate_limit=100))

        response = send(client)

        assert response.status_code == 200
        assert "debug" not in response.json()
        assert "Strict-Transport-Security" in response.headers

    def test_rate_limited(self, make_client, limiter):
        client = make_client(limiter=limiter)

        assert send(client).status_code == 200
        assert send(client).status_code == 200

        response = send(client)
        assert response.status_code == 429
        assert response.json()["code"] == "RATE_LIMITED"
        assert response.headers["X-RateLimit-Limit"] == "2"
        assert "Retry-After" in response.headers


class TestVerifyOTP:

    def test_verify_success(self, client, dispatcher):
        """The right code returns a token, and only once."""
        send(client)
        code = dispatcher.last_code()

        response = verify(client, code)
        assert response.status_code == 200
        data = response.json()
        assert data["success"] is True
        assert data["message"] == "OTP verified successfully!"
        assert len(data["token"]) == 64

        again = verify(client, code)
        assert again.status_code == 400
        assert again.json()["code"] == "OTP_NOT_FOUND"

    def test_wrong_code_counts_down(self, client):
        send(client)

        remaining = []
        for _ in range(3):
            response = verify(client, "000000")
            assert response.status_code == 400
            assert response.json()["code"] == "OTP_INVALID"
            assert response.json()["error"] == "Invalid OTP"
            remaining.append(response.json()["remaining_attempts"])

        assert remaining == [2, 1, 0]
        assert verify(client, "000000").json()["code"] == "OTP_NOT_FOUND"

    def test_expired(self, client, dispatcher, clock):
        send(client, "b@example.com")
        code = dispatcher.last_code()
        clock.advance(301)

        response = verify(client, code, "b@example.com")
        assert response.status_code == 400
        assert response.json()["code"] == "OTP_EXPIRED"
        assert response.json()["error"] == "OTP has expired. Please request a new one."

    def test_not_found(self, client):
        response = verify(client, "123456", "nobody@example.com")

        assert response.status_code == 400
        assert response.json()["code"] == "OTP_NOT_FOUND"

    def test_missing_fields(self, client):
        response = client.post("/api/verify-otp", json={"email": "a@example.com"})

        assert response.status_code == 400
        assert response.json()["error"] == "Email and OTP are required"


class TestDebugListing:

    def test_lists_live_codes(self, client, dispatcher, clock):
        send(client)
        verify(client, "000000")
        clock.advance(100)

        data = client.get("/api/debug/otps").json()

        assert data["count"] == 1
        entry = data["otps"][0]
        assert entry["email"] == "a@example.com"
        assert entry["otp"] == dispatcher.last_code()
        assert entry["attempts"] == 1
        assert entry["expires_in"] == 200

    def test_hidden_in_production(self, make_client):
        from mailotp_core.config import Settings

        client = make_client(settings=Settings(environment="production"))

        assert client.get("/api/debug/otps").status_code == 404


class TestHealthAndMetrics:

    def test_health(self, client):
        data = client.get("/health").json()

        assert data["status"] == "healthy"
        assert data["components"]["mail"]["status"] == "connected"
        assert data["components"]["otp_store"]["details"]["live_records"] == 0

    def test_health_degraded_in_console_mode(self, make_client):
        from mailotp_core.mail import ConsoleMailDispatcher

        client = make_client(dispatcher=ConsoleMailDispatcher())
        data = client.get("/health").json()

        assert data["status"] == "degraded"
        assert data["components"]["mail"]["status"] == "console"

    def test_probes(self, client):
        assert client.get("/health/live").json() == {"status": "alive"}
        assert client.get("/health/ready").json() == {"status": "ready"}

    def test_security_headers(self, client):
        response = client.get("/health/live")

        assert response.headers["X-Content-Type-Options"] == "nosniff"
        assert response.headers["X-Frame-Options"] == "SAMEORIGIN"
        assert "X-Request-ID" in response.headers

    def test_metrics(self, client, dispatcher):
        from mailotp_core.metrics import MetricNames

        send(client, "b@example.com")
        send(client)
        verify(client, dispatcher.last_code())

        text = client.get("/metrics").text

        metrics = client.app.state.otp.metrics
        assert metrics.get_counter(MetricNames.OTP_ISSUED) == 2
        assert metrics.get_gauge(MetricNames.OTP_LIVE_RECORDS) == 1
        assert "mailotp_otp_issued_total" in text
        assert 'mailotp_otp_verifications_total{service="mailotp",env="development",status="success"} 1' in text
        assert 'mailotp_otp_live_records{service="mailotp",env="development"} 1' in text
