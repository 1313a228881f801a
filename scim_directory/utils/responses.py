"""HTTP ответы SCIM"""

from fastapi.responses import JSONResponse

SCIM_CONTENT_TYPE = "application/scim+json"


class SCIMResponse(JSONResponse):
    """JSON ответ с типом содержимого application/scim+json"""
    media_type = SCIM_CONTENT_TYPE
