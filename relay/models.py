from pydantic import BaseModel, ConfigDict, Field

class Move(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    from_: str = Field(alias="from")
    to: str
    capture: bool = False

class MoveRequest(BaseModel):
    moves: list[Move] | None = None

    @property
    def history(self) -> list[Move]:
        return self.moves or []

class MoveResponse(BaseModel):
    move: str
