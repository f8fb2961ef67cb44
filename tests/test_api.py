from fastapi.testclient import TestClient

from transform_engine import main
from transform_engine.main import app

client = TestClient(app)

CBC_VECTOR = "50aaf1ea1040e2b564a39f88d79f140119d813b078261d344cb6eff909384015265d7cc8adfe8d99477442fb5912539d"


def sm4Payload(**overrides) -> dict:
    payload = {
        "input": "0123456789abcdeffedcba9876543210",
        "mode": "CBC",
        "padding": "Pkcs7",
        "format": "HEX",
        "key": "1234567890123456",
        "keyType": "Text",
        "iv": "1234567890123456",
        "ivType": "text",
    }
    payload.update(overrides)
    return payload


def test_presets():
    response = client.get("/")
    assert response.status_code == 200
    body = response.json()
    assert body["bases"] == ["base16", "base32", "base58", "base62", "base64", "base85", "base91"]
    assert body["alphabets"]["base58"].startswith("123456789ABC")
    assert body["modes"] == ["ecb", "cbc", "cfb", "ofb", "ctr"]


def test_basex_round_trip():
    response = client.post("/basex/encode", json={"input": "hello world", "base": "base58"})
    assert response.status_code == 200
    assert response.json() == {"output": "StV1DL6CwTryKyV"}

    response = client.post("/basex/decode", json={"input": "StV1DL6CwTryKyV", "base": "base58"})
    assert response.json() == {"output": "hello world"}


def test_basex_custom_alphabet_rejected():
    response = client.post("/basex/encode", json={"input": "x", "base": "base91", "alphabet": "X"})
    assert response.status_code == 400
    detail = response.json()["detail"]
    assert detail["kind"] == "CustomAlphabetUnsupported"
    assert detail["base"] == "base91"


def test_basex_unknown_base():
    response = client.post("/basex/encode", json={"input": "x", "base": "base2"})
    assert response.status_code == 400
    assert response.json()["detail"]["kind"] == "UnknownBase"


def test_basex_invalid_utf8():
    response = client.post("/basex/decode", json={"input": "c328", "base": "base16"})
    assert response.status_code == 400
    assert response.json()["detail"]["kind"] == "InvalidUtf8Output"


def test_sm4_encrypt_and_decrypt():
    response = client.post("/sm4/encrypt", json=sm4Payload())
    assert response.status_code == 200
    assert response.json()["output"] == CBC_VECTOR

    response = client.post("/sm4/decrypt", json=sm4Payload(input=CBC_VECTOR))
    assert response.status_code == 200
    assert response.json()["output"] == "0123456789abcdeffedcba9876543210"


def test_sm4_wrong_key_length_detail():
    response = client.post("/sm4/encrypt", json=sm4Payload(key="abc"))
    assert response.status_code == 400
    assert response.json()["detail"] == {
        "kind": "WrongKeyOrIvLength",
        "message": "Key must be 16 bytes, got 3 bytes",
        "field": "Key",
        "expected": 16,
        "actual": 3,
    }


def test_sm4_missing_iv():
    response = client.post("/sm4/encrypt", json=sm4Payload(iv=None, ivType=None))
    assert response.status_code == 400
    assert response.json()["detail"]["kind"] == "MissingIv"


def test_sm4_invalid_padding_on_wrong_key():
    response = client.post(
        "/sm4/decrypt",
        json=sm4Payload(input=CBC_VECTOR, mode="ecb", iv=None, ivType=None, key="6543210987654321"),
    )
    assert response.status_code == 400
    assert response.json()["detail"]["kind"] in ("InvalidPkcs7Padding", "InvalidUtf8Output")


def test_sm4_unknown_mode_is_a_schema_error():
    response = client.post("/sm4/encrypt", json=sm4Payload(mode="gcm"))
    assert response.status_code == 422


def test_trivium_xor():
    payload = {"key": [0] * 10, "iv": [0] * 10, "data": [0] * 4}
    response = client.post("/trivium/xor", json=payload)
    assert response.status_code == 200
    assert response.json() == {"data": [0xFB, 0xE0, 0xBF, 0x26]}

    payload["data"] = response.json()["data"]
    response = client.post("/trivium/xor", json=payload)
    assert response.json() == {"data": [0, 0, 0, 0]}


def test_trivium_rejects_bad_bit_order_and_bytes():
    response = client.post("/trivium/xor", json={"key": [], "iv": [], "data": [1], "bitOrder": "middle"})
    assert response.status_code == 400
    assert response.json()["detail"]["kind"] == "UnsupportedBitOrder"

    response = client.post("/trivium/xor", json={"key": [256], "iv": [], "data": []})
    assert response.status_code == 422


def test_trivium_text_round_trip():
    request = {"input": "hello trivium", "key": "k", "format": "Base64", "bitOrder": "lsb-first"}
    ciphertext = client.post("/trivium/encrypt", json=request).json()["output"]
    request["input"] = ciphertext
    response = client.post("/trivium/decrypt", json=request)
    assert response.json() == {"output": "hello trivium"}


def test_input_size_limit(monkeypatch):
    monkeypatch.setattr(main, "MAX_INPUT_BYTES", 8)
    response = client.post("/basex/encode", json={"input": "x" * 9, "base": "base64"})
    assert response.status_code == 413
