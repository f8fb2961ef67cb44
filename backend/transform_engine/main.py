from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from .basex import Base, basex_decode, basex_encode, default_alphabets
from .config import CORS_ALLOW_ORIGINS, LOG_LEVEL, MAX_INPUT_BYTES, MAX_INPUT_MB
from .errors import EngineError
from .schemas import (
    BytesResult,
    CipherFormat,
    CipherRequest,
    EncodingRequest,
    KeyType,
    Sm4Mode,
    Sm4Padding,
    StreamCipherRequest,
    TextResult,
    TriviumTextRequest,
)
from .sm4_engine import sm4_decrypt, sm4_encrypt
from .trivium import parse_bit_order, trivium_decrypt, trivium_encrypt, trivium_xor
import time
import logging

# Configure logging
logger = logging.getLogger("uvicorn")
logger.setLevel(LOG_LEVEL)

app = FastAPI(title="Transform Engine")

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ALLOW_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# --- Helpers ---

def _check_input_size(size: int):
    if size > MAX_INPUT_BYTES:
        raise HTTPException(status_code=413, detail=f"Input too large. Maximum size is {MAX_INPUT_MB}MB.")

def _elapsed_ms(start_time: float) -> float:
    return (time.perf_counter() - start_time) * 1000

def _engine_failure(operation: str, e: EngineError) -> HTTPException:
    logger.warning(f"⚠️ {operation} failed: {e.kind.value} ({e.message})")
    return HTTPException(status_code=400, detail=e.to_dict())

# --- Endpoints ---

@app.get("/")
def get_presets():
    return {
        "bases": [base.value for base in Base],
        "alphabets": default_alphabets(),
        "modes": [mode.value for mode in Sm4Mode],
        "paddings": [padding.value for padding in Sm4Padding],
        "formats": [fmt.value for fmt in CipherFormat],
        "keyTypes": [key_type.value for key_type in KeyType],
        "bitOrders": ["msb", "lsb"],
    }

@app.post("/basex/encode", response_model=TextResult)
def encode_text(req: EncodingRequest):
    _check_input_size(len(req.input))
    start_time = time.perf_counter()
    try:
        output = basex_encode(req.input, req.base, req.alphabet)
    except EngineError as e:
        raise _engine_failure("BaseX encode", e)
    logger.info(f"🔤 BaseX encode {req.base} ({len(req.input)} chars) in {_elapsed_ms(start_time):.2f}ms")
    return {"output": output}

@app.post("/basex/decode", response_model=TextResult)
def decode_text(req: EncodingRequest):
    _check_input_size(len(req.input))
    start_time = time.perf_counter()
    try:
        output = basex_decode(req.input, req.base, req.alphabet)
    except EngineError as e:
        raise _engine_failure("BaseX decode", e)
    logger.info(f"🔤 BaseX decode {req.base} ({len(req.input)} chars) in {_elapsed_ms(start_time):.2f}ms")
    return {"output": output}

@app.post("/sm4/encrypt", response_model=TextResult)
def encrypt_text(req: CipherRequest):
    _check_input_size(len(req.input))
    start_time = time.perf_counter()
    try:
        ciphertext = sm4_encrypt(req)
    except EngineError as e:
        raise _engine_failure("SM4 encrypt", e)
    logger.info(
        f"🔐 SM4 encrypt {req.mode.value}/{req.padding.value} -> {req.format.value} "
        f"({len(req.input)} chars) in {_elapsed_ms(start_time):.2f}ms"
    )
    return {"output": ciphertext}

@app.post("/sm4/decrypt", response_model=TextResult)
def decrypt_text(req: CipherRequest):
    _check_input_size(len(req.input))
    start_time = time.perf_counter()
    try:
        plaintext = sm4_decrypt(req)
    except EngineError as e:
        raise _engine_failure("SM4 decrypt", e)
    logger.info(
        f"🔓 SM4 decrypt {req.mode.value}/{req.padding.value} <- {req.format.value} "
        f"({len(req.input)} chars) in {_elapsed_ms(start_time):.2f}ms"
    )
    return {"output": plaintext}

@app.post("/trivium/xor", response_model=BytesResult)
def xor_stream(req: StreamCipherRequest):
    _check_input_size(len(req.data))
    start_time = time.perf_counter()
    try:
        order = parse_bit_order(req.bit_order)
        result = trivium_xor(bytes(req.key), bytes(req.iv), bytes(req.data), req.bit_order)
    except EngineError as e:
        raise _engine_failure("Trivium xor", e)
    logger.info(f"🔁 Trivium xor ({len(req.data)} bytes, {order.name}) in {_elapsed_ms(start_time):.2f}ms")
    return {"data": list(result)}

@app.post("/trivium/encrypt", response_model=TextResult)
def encrypt_stream_text(req: TriviumTextRequest):
    _check_input_size(len(req.input))
    start_time = time.perf_counter()
    try:
        ciphertext = trivium_encrypt(req)
    except EngineError as e:
        raise _engine_failure("Trivium encrypt", e)
    logger.info(f"🔐 Trivium encrypt -> {req.format.value} ({len(req.input)} chars) in {_elapsed_ms(start_time):.2f}ms")
    return {"output": ciphertext}

@app.post("/trivium/decrypt", response_model=TextResult)
def decrypt_stream_text(req: TriviumTextRequest):
    _check_input_size(len(req.input))
    start_time = time.perf_counter()
    try:
        plaintext = trivium_decrypt(req)
    except EngineError as e:
        raise _engine_failure("Trivium decrypt", e)
    logger.info(f"🔓 Trivium decrypt <- {req.format.value} ({len(req.input)} chars) in {_elapsed_ms(start_time):.2f}ms")
    return {"output": plaintext}
