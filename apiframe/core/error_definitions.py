"""Error Definitions — user-declared errors that actions and authenticators may raise."""

from dataclasses import dataclass, field

from apiframe.core.fields import FieldSet


@dataclass(frozen=True, eq=False)
class ErrorDefinition:
    """A declared error: stable code, description, HTTP status and detail fields."""

    id: str
    code: str | None = None
    description: str | None = None
    http_status: int = 500
    fields: FieldSet = field(default_factory=FieldSet)
    name: str | None = None
    schema: bool = True

    def collate_objects(self, objects) -> None:
        self.fields.collate_objects(objects)

    def validate(self, errors) -> None:
        if not self.id:
            errors.add(self, "MissingID", "An ID must be defined for errors")
        if not self.code:
            errors.add(self, "MissingCode", "A code must be defined for errors")
        if not isinstance(self.http_status, int) or not 100 <= self.http_status <= 599:
            errors.add(
                self, "InvalidHTTPStatus",
                f"The HTTP status must be between 100 and 599 (was: {self.http_status!r})",
            )
        self.fields.validate(errors)
