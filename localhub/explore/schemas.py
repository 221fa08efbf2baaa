from pydantic import BaseModel, Field
from typing import Annotated, Literal, Union


class SearchAction(BaseModel):
    action: Literal["search"]
    query: str = ""


class CategoryAction(BaseModel):
    action: Literal["category"]
    category: str


class TrendingAction(BaseModel):
    action: Literal["trending"]


ExploreRequest = Annotated[
    Union[SearchAction, CategoryAction, TrendingAction],
    Field(discriminator="action"),
]
