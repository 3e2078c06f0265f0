import uuid

from ..core.ports import IdGenerator


class UuidId(IdGenerator):
    def new_id(self) -> str:
        return str(uuid.uuid4())
