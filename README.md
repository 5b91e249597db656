# workspace_mcp

Building blocks for an MCP server that fronts a workspace account with its
own OAuth 2.1 authorization server, plus RFC 5322 message composition for
Gmail.

## Modules

- `workspace_mcp.mime` — `compose(req)` builds raw RFC 5322 bytes from a
  `Compose` request (`sender`, `to`, `cc`, `bcc`, `subject`, `body_text`,
  `body_html`, `attachments`, `reply`). Text plus HTML gives a
  `multipart/alternative` body. A `ReplyContext` adds `In-Reply-To` and a
  `References` chain (angle brackets are normalised, the original id is
  appended once) and a single `Re:` subject prefix; an empty subject falls
  back to the original one. `compose_for_gmail(req)` returns the same
  message as unpadded base64url for a Gmail `{"raw": ...}` payload.
  `ResolvedAttachment.from_input` loads an `AttachmentInput` from standard
  or url-safe base64 (padded or not) or from a file path, never both.
  Messages and attachments are limited to 24 MB (`MAX_MESSAGE_BYTES`).
- `workspace_mcp.pkce` — `s256_challenge(verifier)` and
  `verify_s256(code_verifier, code_challenge)`, a constant-time S256 check
  that rejects empty inputs.
- `workspace_mcp.tokens` — `Claims`, `sign(secret, claims)` and
  `verify(token, secret, expected_audience)` for HS256 tokens with a 60 s
  expiry leeway. A token without `aud` is accepted for any expected
  audience; a token with a different `aud` raises `AudienceMismatchError`.
  `TOKEN_LIFETIME_SECS` is 30 days.
- `workspace_mcp.oauth_errors` — `JwtError` and its subclasses, and
  `oauth_err(error, description)` returning an `OAuthErrorBody` whose
  `to_dict()` omits an unset description.
- `workspace_mcp.crypto` — `seal(key, aad, plaintext)` and
  `unseal(key, aad, nonce, ciphertext)` with AES-256-GCM, a 32-byte key and
  a random 12-byte nonce per call. Wrong key, changed ciphertext or
  different associated data raise `DecryptError`; a nonce of the wrong
  length raises `InvalidNonceError`.
- `workspace_mcp.db` — `Database.open(path)` (WAL, foreign keys) and
  `Database.open_in_memory()`, both migrated; `Database.call(func)` runs
  `func(connection)` in one transaction and raises `DbError` on SQLite
  errors. `Database` is also a context manager that closes on exit.
- `workspace_mcp.codes` — `insert_code` / `consume_code` and
  `insert_state` / `consume_state` for single-use records that expire after
  five minutes; consuming deletes the row and returns `None` when it is
  unknown or expired. `sweep_expired(db)` deletes expired rows and returns
  how many were removed.
- `workspace_mcp.discovery` — `issuer_from_headers(headers, fallback_base)`
  (honours `X-Forwarded-Host` / `X-Forwarded-Proto`, defaults loopback
  hosts to `http`), `is_valid_redirect_uri(uri)` (any `https`, `http` only
  for `localhost`, `127.0.0.1` or `[::1]`), and the
  `protected_resource_metadata` / `authorization_server_metadata`
  documents.
- `workspace_mcp.authflow` — `validate_redirect_uris`,
  `validate_authorize_request`, `build_callback_redirect` and
  `mint_access_token`, which raise `OAuthRequestError` (with `status` and
  `to_dict()`) on rejection; `mint_access_token` returns a `TokenResponse`.

## Install

```
pip install .
```

Tests:

```
pip install ".[test]"
pytest
```

## Example

```python
from workspace_mcp.mime import Compose, Recipient, compose_for_gmail
from workspace_mcp.pkce import s256_challenge, verify_s256

raw = compose_for_gmail(
    Compose(
        sender=Recipient(email="me@example.com"),
        to=[Recipient(email="you@example.com", name="You")],
        subject="Hello",
        body_text="Body text",
    )
)

challenge = s256_challenge("verifier-string-with-some-entropy-1234")
assert verify_s256("verifier-string-with-some-entropy-1234", challenge)
```

Errors are raised as exceptions: `NoRecipientsError` when a message has no
recipient, `AudienceMismatchError` when a token is for another resource,
`DecryptError` when sealed data was tampered with, and so on.

## What this package does not do

It has no HTTP server, no command to run, and no MCP tool handlers. It does
not talk to Google: there is no code exchange, token refresh or Gmail,
Sheets or Drive client. Storage covers only authorization codes and proxy
states; there are no tables or functions for registered clients or user
accounts.