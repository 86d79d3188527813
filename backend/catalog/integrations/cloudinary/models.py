from pydantic import BaseModel


class DeleteResourcesResult(BaseModel):
    # public_id -> "deleted" | "not_found"
    deleted: dict[str, str] = {}
    partial: bool = False

    @property
    def not_found(self) -> list[str]:
        return [pid for pid, state in self.deleted.items() if state == "not_found"]
