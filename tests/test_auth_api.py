import unittest

from api_support import ApiTestMixin


class AuthApiTests(ApiTestMixin, unittest.TestCase):
    def test_register_returns_token_and_user(self):
        response = self.client.post(
            "/api/auth/register",
            json={"email": "Test@Example.com", "password": "password123", "firstName": "Test", "lastName": "User"},
        )
        self.assertEqual(response.status_code, 201)
        body = response.json()
        self.assertEqual(body["message"], "User registered successfully")
        self.assertTrue(body["token"])
        self.assertEqual(body["user"]["email"], "test@example.com")
        self.assertEqual(body["user"]["name"], "Test User")
        self.assertNotIn("passwordHash", body["user"])

    def test_duplicate_email_is_rejected(self):
        self.register()
        response = self.client.post(
            "/api/auth/register",
            json={"name": "Other", "email": "ada@example.com", "password": "password123"},
        )
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["error"], "User already exists")

    def test_register_validates_fields(self):
        response = self.client.post("/api/auth/register", json={"name": "X", "email": "nope", "password": "123"})
        self.assertEqual(response.status_code, 400)
        fields = {error["field"] for error in response.json()["errors"]}
        self.assertEqual(fields, {"email", "password"})

    def test_login(self):
        self.register()
        response = self.client.post("/api/auth/login", json={"email": "ada@example.com", "password": "password123"})
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["message"], "Login successful")
        self.assertEqual(response.json()["user"]["email"], "ada@example.com")

    def test_login_with_wrong_password(self):
        self.register()
        response = self.client.post("/api/auth/login", json={"email": "ada@example.com", "password": "wrongpassword"})
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["error"], "Invalid credentials")

    def test_me_requires_valid_token(self):
        token = self.register()
        response = self.client.get("/api/auth/me", headers=self.auth(token))
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["user"]["name"], "Ada Lovelace")

        missing = self.client.get("/api/auth/me")
        self.assertEqual(missing.status_code, 401)
        self.assertEqual(missing.json()["error"], "No token, authorization denied")

        forged = self.client.get("/api/auth/me", headers=self.auth("not-a-jwt"))
        self.assertEqual(forged.status_code, 401)
        self.assertEqual(forged.json()["error"], "Token is not valid")


class HealthApiTests(ApiTestMixin, unittest.TestCase):
    def test_health(self):
        response = self.client.get("/api/health")
        self.assertEqual(response.status_code, 200)
        body = response.json()
        self.assertEqual(body["status"], "OK")
        self.assertIn("timestamp", body)
        self.assertGreaterEqual(body["uptime"], 0)


if __name__ == "__main__":
    unittest.main()
