import json, time, uuid, logging
from typing import Optional

logger = logging.getLogger("produce_api.oplog")

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(level: str = "INFO"):
    logging.basicConfig(level=getattr(logging, level.upper(), logging.INFO), format=LOG_FORMAT)


class LogContext:
    """
    One operation-log line per mutating request.

    Usage mirrors a try/except around the work: set the entity and payload,
    then call write("OK") or write("ERROR", msg) exactly once.
    """

    def __init__(self, action: str, user: str = "anonymous"):
        self.action = action
        self.user = user
        self.request_id = str(uuid.uuid4())
        self.start = time.perf_counter()
        self.after = None
        self.payload = None
        self.entity_type = None
        self.entity_id = None

    def set_entity(self, etype: str, eid):
        self.entity_type = etype
        self.entity_id = None if eid is None else str(eid)

    def set_after(self, obj): self.after = obj
    def set_payload(self, obj): self.payload = obj

    def record(self, result: str = "OK", err: Optional[str] = None) -> dict:
        return {
            "request_id": self.request_id,
            "user": self.user,
            "action": self.action,
            "entity_type": self.entity_type,
            "entity_id": self.entity_id,
            "after": self.after,
            "payload": self.payload,
            "result": result,
            "err_msg": err,
            "latency_ms": int((time.perf_counter() - self.start) * 1000),
        }

    def write(self, result: str = "OK", err: Optional[str] = None):
        rec = self.record(result, err)
        if result == "OK":
            level = logging.INFO
        elif result == "ERROR":
            level = logging.ERROR
        else:
            level = logging.WARNING
        logger.log(level, "%s %s", self.action, json.dumps(rec, ensure_ascii=False, default=str))
        return rec
