from __future__ import annotations

from typing import Any, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from .tuples import decode_embedded, decode_pair, encode_pair


class _Frozen(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")


class Sample(_Frozen):
    timestamp: int
    value: float

    @model_validator(mode="before")
    @classmethod
    def _decode(cls, data: Any) -> Any:
        if isinstance(data, (str, bytes)):
            return decode_embedded(data).model_dump()
        if isinstance(data, (list, tuple)):
            return decode_pair(data).model_dump()
        return data

    def to_pair(self) -> list[float | int]:
        return encode_pair(self)


class MetricSeries(_Frozen):
    target: str
    points: list[Sample] = Field(default_factory=list, alias="datapoints")
    tags: dict[str, str] = Field(default_factory=dict)

    @field_validator("points", mode="before")
    @classmethod
    def _null_points(cls, value: Any) -> Any:
        return [] if value is None else value

    @field_validator("tags", mode="before")
    @classmethod
    def _null_tags(cls, value: Any) -> Any:
        return {} if value is None else value

    def to_dict(self) -> dict[str, Any]:
        return {
            "target": self.target,
            "datapoints": [point.to_pair() for point in self.points],
            "tags": dict(self.tags),
        }


class ExpectedResult(_Frozen):
    hashes: list[str] = Field(default_factory=list, alias="sha256")
    metrics: list[MetricSeries] = Field(default_factory=list)

    @field_validator("hashes", mode="before")
    @classmethod
    def _stringify_hashes(cls, value: Any) -> Any:
        # YAML may resolve an all-digit digest to a number.
        if value is None:
            return []
        if isinstance(value, list):
            return [str(item) for item in value]
        return value


class ExpectedResponse(_Frozen):
    http_code: int = Field(alias="httpCode")
    content_type: str = Field(default="", alias="contentType")
    results: list[ExpectedResult] = Field(default_factory=list, alias="expectedResults")

    def first_result(self) -> ExpectedResult:
        # Only the first expected result takes part in body validation.
        if not self.results:
            return ExpectedResult()
        return self.results[0]


class ScriptedQuery(_Frozen):
    endpoint: str
    path: str = Field(default="", alias="URL")
    delay: Union[int, float, str] = 0
    method: str = Field(default="GET", alias="type")
    body: str = ""
    expected: ExpectedResponse = Field(alias="expectedResponse")

    def describe(self) -> str:
        return f"{self.method.upper()} {self.endpoint}{self.path}"


class ManagedApp(_Frozen):
    name: str
    binary: str
    args: list[str] = Field(default_factory=list)

    @field_validator("args", mode="before")
    @classmethod
    def _stringify_args(cls, value: Any) -> Any:
        if value is None:
            return []
        if isinstance(value, list):
            return [str(item) for item in value]
        return value


class TestSchema(_Frozen):
    __test__ = False

    apps: list[ManagedApp] = Field(default_factory=list)
    queries: list[ScriptedQuery] = Field(default_factory=list)
