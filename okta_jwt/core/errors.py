"""Exception hierarchy for key retrieval and token verification."""


class VerifierError(Exception):
    """Base class for every failure raised by the verifier."""


class NetworkError(VerifierError):
    """The issuer's key endpoint could not be reached."""

    def __init__(self, message: str, *, url: str, status_code: int | None = None):
        super().__init__(message)
        self.url = url
        self.status_code = status_code


class ParseError(VerifierError):
    """Malformed key set JSON or unusable key material."""


class NoKeyId(VerifierError):
    """Token header carries no key id."""


class NoMatchingKey(VerifierError):
    """No cached key matches the token's key id."""

    def __init__(self, kid: str):
        super().__init__(f"No matching key found for kid {kid!r}")
        self.kid = kid


class ClientIdMismatch(VerifierError):
    """Token cid differs from the configured client id."""


class TokenValidationError(VerifierError):
    """Signature or registered-claim validation failed."""


class MalformedToken(TokenValidationError):
    """Token is not a decodable compact JWT."""


class SignatureInvalid(TokenValidationError):
    """Signature does not verify against the resolved key."""


class AlgorithmMismatch(TokenValidationError):
    """Token header alg differs from the key's algorithm."""


class TokenExpired(TokenValidationError):
    """exp is further in the past than the configured leeway."""


class TokenNotYetValid(TokenValidationError):
    """nbf or iat lies in the future beyond the configured leeway."""


class IssuerMismatch(TokenValidationError):
    """iss is missing or differs from the verifier's issuer."""


class AudienceMismatch(TokenValidationError):
    """aud is missing or shares no value with the configured audience."""


class MissingRequiredClaim(TokenValidationError):
    """A claim the verifier relies on is absent."""

    def __init__(self, claim: str):
        super().__init__(f"Token is missing the {claim!r} claim")
        self.claim = claim


class ClaimDeserializeError(VerifierError):
    """Verified payload does not fit the requested claim type."""
