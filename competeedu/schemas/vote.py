from pydantic import BaseModel, Field


class VoteResponse(BaseModel):
    success: bool
    vote_count: int = Field(..., serialization_alias="voteCount")


class VoteCountResponse(BaseModel):
    vote_count: int = Field(..., serialization_alias="voteCount")
