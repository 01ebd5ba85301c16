"""
기기별 의사(pseudo) 식별자. 최초 1회 생성해 로컬 저장소에 보관하고 이후 재사용.
인증 수단이 아니라 상관관계 키로만 쓴다.
"""

import logging
import secrets
import string
import time

from quizlink.core.constants import DEVICE_ID_KEY
from quizlink.db.local_store import LocalStore

logger = logging.getLogger(__name__)

_ALPHABET = string.ascii_lowercase + string.digits


def make_id(prefix: str) -> str:
    """<prefix>_<epoch ms>_<base36 9자>"""
    suffix = "".join(secrets.choice(_ALPHABET) for _ in range(9))
    return f"{prefix}_{int(time.time() * 1000)}_{suffix}"


def get_device_id(local: LocalStore) -> str:
    device_id = local.get_value(DEVICE_ID_KEY)
    if device_id:
        return device_id
    device_id = make_id("device")
    try:
        local.set_value(DEVICE_ID_KEY, device_id)
    except OSError:
        logger.warning("deviceId 저장 실패 (이번 실행에서만 사용) device_id=%s", device_id)
    return device_id
