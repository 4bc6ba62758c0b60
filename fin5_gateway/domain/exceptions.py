"""Domain-specific exceptions"""


class DomainException(Exception):
    """Base exception for domain layer"""

    pass


class VerificationAPIError(DomainException):
    """Identity/bureau verification provider returned an error or is unavailable"""

    pass


class InvalidLenderRuleError(DomainException, ValueError):
    """Lender constraints are inconsistent (min above max)"""

    pass



class PolicyNotActiveError(DomainException):
    """Claim submitted against a policy that is not active"""

    pass


class InvalidClaimTransitionError(DomainException):
    """Claim decision requested for a claim that is no longer pending"""

    pass
