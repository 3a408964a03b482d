from datetime import datetime, timezone


def utcnow() -> datetime:
    # Python-side timestamps stay loaded on the instance after flush,
    # so async sessions never need a lazy refresh to read them.
    return datetime.now(timezone.utc)
