from passlib.context import CryptContext

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

BCRYPT_MAX_BYTES = 72


def _bcrypt_safe(password: str) -> str:
    """Clip to bcrypt's 72-byte input limit without splitting a UTF-8 character."""
    encoded = password.encode("utf-8")
    if len(encoded) <= BCRYPT_MAX_BYTES:
        return password
    return encoded[:BCRYPT_MAX_BYTES].decode("utf-8", errors="ignore")


class Hasher:
    @staticmethod
    def hash_password(password: str) -> str:
        return pwd_context.hash(_bcrypt_safe(password))

    @staticmethod
    def verify_password(plain_password: str, hashed_password) -> bool:
        # hashed_password is nullable
        if not hashed_password:
            return False
        return pwd_context.verify(_bcrypt_safe(plain_password), hashed_password)
