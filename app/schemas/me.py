from pydantic import BaseModel


class MeOut(BaseModel):
    api_key_id: str
    user_id: str
    role: str
    seller_id: str | None
