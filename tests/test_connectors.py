import pytest
import resend

from khanya.config import Settings
from khanya.errors import ConfigurationError, DeliveryError, UpstreamRejected
from khanya.models.connector_base import ConnectorConfig, ConnectorStatus
from khanya.models.connector_manager import build_connector_manager
from khanya.models.paystack_connector import PaystackConnector
from khanya.models.resend_connector import ResendConnector
from khanya.models.supabase_auth_connector import SupabaseAuthConnector
from khanya.models.winsms_connector import WinSMSConnector


class FakeResponse:
    def __init__(self, status_code=200, payload=None):
        self.status_code = status_code
        self._payload = payload
        self.text = "" if payload is None else str(payload)

    @property
    def ok(self):
        return self.status_code < 400

    def json(self):
        if self._payload is None:
            raise ValueError("no json")
        return self._payload


@pytest.fixture
def calls():
    return []


def _stub(monkeypatch, connector, calls, response):
    def request(method, url, **kwargs):
        calls.append((method, url, kwargs))
        return response

    monkeypatch.setattr(connector.session, "request", request)


def test_paystack_initialize(monkeypatch, calls):
    connector = PaystackConnector(ConnectorConfig(name="Paystack", api_key="sk_test_1"))
    _stub(monkeypatch, connector, calls, FakeResponse(200, {
        "status": True, "message": "Authorization URL created",
        "data": {"authorization_url": "https://checkout.paystack.com/x", "access_code": "x", "reference": "KH1"},
    }))

    data = connector.initialize_transaction("a@example.com", 45000, "KH1", callback_url="https://khanya.store/cb")
    assert data["access_code"] == "x"

    method, url, kwargs = calls[0]
    assert (method, url) == ("POST", "https://api.paystack.co/transaction/initialize")
    assert kwargs["headers"]["Authorization"] == "Bearer sk_test_1"
    assert kwargs["json"]["currency"] == "ZAR"
    assert kwargs["json"]["amount"] == 45000
    assert kwargs["json"]["callback_url"] == "https://khanya.store/cb"
    assert kwargs["json"]["metadata"]["order_number"] == "KH1"


def test_paystack_rejection(monkeypatch, calls):
    connector = PaystackConnector(ConnectorConfig(name="Paystack", api_key="sk_test_1"))
    _stub(monkeypatch, connector, calls, FakeResponse(400, {"status": False, "message": "Invalid key"}))
    with pytest.raises(UpstreamRejected, match="Invalid key"):
        connector.initialize_transaction("a@example.com", 100, "KH1")


def test_paystack_verify_quotes_reference(monkeypatch, calls):
    connector = PaystackConnector(ConnectorConfig(name="Paystack", api_key="sk_test_1"))
    _stub(monkeypatch, connector, calls, FakeResponse(200, {"status": True, "data": {"status": "success"}}))
    payload = connector.verify_transaction("KH 1/2")
    assert payload["data"]["status"] == "success"
    assert calls[0][1] == "https://api.paystack.co/transaction/verify/KH%201%2F2"


def test_paystack_not_configured():
    connector = PaystackConnector(ConnectorConfig(name="Paystack"))
    assert connector.status is ConnectorStatus.NOT_CONFIGURED
    with pytest.raises(ConfigurationError, match="Paystack service not configured"):
        connector.verify_transaction("KH1")


def test_winsms_send(monkeypatch, calls):
    connector = WinSMSConnector(ConnectorConfig(
        name="WinSMS", api_key="key-1", additional_config={"username": "khanya"},
    ))
    _stub(monkeypatch, connector, calls, FakeResponse(200, {"recipients": [{"accepted": True}]}))
    connector.send_sms("27821234567", "Khanya code: 123456. Expires in 10 min.")

    method, url, kwargs = calls[0]
    assert url == "https://api.winsms.co.za/api/rest/v1/sms/outgoing/send"
    assert kwargs["headers"]["AUTHORIZATION"] == "key-1"
    assert kwargs["json"]["recipients"] == [{"mobileNumber": "27821234567"}]


def test_winsms_error(monkeypatch, calls):
    connector = WinSMSConnector(ConnectorConfig(
        name="WinSMS", api_key="key-1", additional_config={"username": "khanya"},
    ))
    _stub(monkeypatch, connector, calls, FakeResponse(401, {"message": "Invalid API key"}))
    with pytest.raises(DeliveryError, match="WinSMS API error: Invalid API key"):
        connector.send_sms("27821234567", "hi")


def test_winsms_error_without_json_body(monkeypatch, calls):
    connector = WinSMSConnector(ConnectorConfig(
        name="WinSMS", api_key="key-1", additional_config={"username": "khanya"},
    ))
    response = FakeResponse(502)
    response.text = "Bad gateway"
    _stub(monkeypatch, connector, calls, response)
    with pytest.raises(DeliveryError, match="WinSMS API error: Bad gateway"):
        connector.send_sms("27821234567", "hi")


def test_winsms_needs_username():
    connector = WinSMSConnector(ConnectorConfig(name="WinSMS", api_key="key-1"))
    assert not connector.is_configured


def test_resend_send(monkeypatch):
    sent = []

    def send(params):
        sent.append((resend.api_key, params))
        return {"id": "email_1"}

    monkeypatch.setattr(resend.Emails, "send", send)
    monkeypatch.setattr(resend, "api_key", None)
    connector = ResendConnector(ConnectorConfig(name="Resend", api_key="re_1"))
    assert resend.api_key == "re_1"

    message_id = connector.send_email("Khanya <noreply@mail.khanya.store>", "a@example.com",
                                      "Hello", "<p>hi</p>", reply_to="b@example.com")
    assert message_id == "email_1"
    api_key, params = sent[0]
    assert api_key == "re_1"
    assert params["to"] == ["a@example.com"]
    assert params["reply_to"] == "b@example.com"


def test_resend_failure(monkeypatch):
    def send(params):
        raise RuntimeError("domain not verified")

    monkeypatch.setattr(resend.Emails, "send", send)
    monkeypatch.setattr(resend, "api_key", None)
    connector = ResendConnector(ConnectorConfig(name="Resend", api_key="re_1"))
    with pytest.raises(DeliveryError, match="domain not verified"):
        connector.send_email("x@khanya.store", "a@example.com", "Hello", "<p>hi</p>")


def test_supabase_get_user(monkeypatch, calls):
    connector = SupabaseAuthConnector(ConnectorConfig(
        name="Supabase Auth", api_key="service", base_url="https://proj.supabase.co",
    ))
    _stub(monkeypatch, connector, calls, FakeResponse(200, {"id": "u1", "email": "a@example.com"}))
    assert connector.get_user("tok")["id"] == "u1"
    method, url, kwargs = calls[0]
    assert url == "https://proj.supabase.co/auth/v1/user"
    assert kwargs["headers"]["Authorization"] == "Bearer tok"


def test_supabase_rejected_token(monkeypatch, calls):
    connector = SupabaseAuthConnector(ConnectorConfig(
        name="Supabase Auth", api_key="service", base_url="https://proj.supabase.co",
    ))
    _stub(monkeypatch, connector, calls, FakeResponse(401, {"msg": "invalid JWT"}))
    assert connector.get_user("tok") is None


def test_build_connector_manager():
    manager = build_connector_manager(Settings(paystack_secret_key="sk_test_1"))
    listed = {c["name"]: c["configured"] for c in manager.list_connectors()}
    assert listed == {"paystack": True, "email": False, "sms": False, "auth": False}
    assert "sk_test_1" not in str(manager.list_connectors())
