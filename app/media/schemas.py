from app.utils.casing import CamelModel


class MediaTokenResponse(CamelModel):
    token: str
    app_id: str
    uid: str
