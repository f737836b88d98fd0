class InvariantViolation(Exception):
    """A domain rule was broken."""


class GuardViolation(InvariantViolation):
    """
    Precondition failure for a lifecycle operation.

    Raised before any state is touched, on the client (against its cached
    rows) and on the server (against the locked rows). The class name is the
    wire code, so both sides can round-trip it.
    """

    @property
    def code(self) -> str:
        return type(self).__name__


class NotADraft(GuardViolation):
    pass


class NotInactive(GuardViolation):
    pass


class CannotDeletePublished(GuardViolation):
    pass


class SoleVersion(GuardViolation):
    pass


class NoPublishedVersion(GuardViolation):
    pass


class IllegalTransition(GuardViolation):
    pass


class TemplateNotReady(GuardViolation):
    pass


class ElementNotEditable(GuardViolation):
    pass


GUARD_VIOLATIONS = {
    cls.__name__: cls
    for cls in (
        NotADraft,
        NotInactive,
        CannotDeletePublished,
        SoleVersion,
        NoPublishedVersion,
        IllegalTransition,
        TemplateNotReady,
        ElementNotEditable,
    )
}
