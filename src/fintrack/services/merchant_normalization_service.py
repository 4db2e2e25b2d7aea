"""
Merchant normalization - turns raw card statement descriptions into stable keys.

The same merchant shows up on statements in many shapes:

    "UBER *TRIP 12345 SAO PAULO BR"   -> "UBER"
    "PAG*IFOOD RESTAURANTE"           -> "IFOOD"
    "Padaria São João 0042"           -> "PADARIAJOAO"

Keys are what merchant category rules are looked up by, so this function has
to be deterministic: the same description always yields the same key.

Steps:
1. Uppercase, trim and strip accents
2. Drop payment processor prefixes (PAG*, PGTO*, PIX ...)
3. Replace long digit runs (ids, phone numbers) and punctuation with spaces
4. Drop noise tokens (locations, legal suffixes, transaction words), pure
   numbers and single characters
5. Return a known merchant when the remaining text starts with one
6. Otherwise keep the first two tokens, joined without spaces, capped at
   50 characters

Descriptions that reduce to fewer than two characters have no key (None).
"""

from __future__ import annotations

import re
import unicodedata

MAX_KEY_LENGTH = 50
MIN_KEY_LENGTH = 2
MAX_PRIMARY_TOKENS = 2

_WHITESPACE = re.compile(r"\s+")
_LONG_NUMBER = re.compile(r"\d{6,}")
_SHORT_NUMBER = re.compile(r"\b\d{1,5}\b")
_SPECIAL_CHARS = re.compile(r"[^A-Z0-9\s]")
_DIGITS = re.compile(r"^\d+$")

# Longest first so PAGTO is tried before PAG.
PAYMENT_PREFIXES = ("PAGTO", "PGTO", "PAG", "PIX", "PG")

NOISE_TOKENS = frozenset(
    {
        # locations
        "BR", "BRASIL", "BRAZIL",
        "SAO", "PAULO", "SP", "RJ", "MG", "RS", "PR", "SC", "BA", "PE", "CE",
        "RIO", "JANEIRO", "BELO", "HORIZONTE", "PORTO", "ALEGRE", "CURITIBA",
        "FLORIANOPOLIS", "SALVADOR", "RECIFE", "FORTALEZA", "BRASILIA",
        # legal entity suffixes
        "LTDA", "ME", "EPP", "EIRELI", "SA", "SS", "FILIAL",
        # business suffixes
        "COM", "NET", "ORG", "IO", "APP", "LOJA", "STORE", "SHOP",
        # transaction types
        "COMPRA", "PURCHASE", "PAGAMENTO", "PAYMENT",
        "DEBITO", "CREDITO", "DEBIT", "CREDIT",
        "PARCELA", "PARC", "INSTALLMENT",
        # service indicators
        "TRIP", "RIDE", "EATS", "DELIVERY", "ENTREGA",
        # connectives
        "DE", "DO", "DA", "DOS", "DAS", "E", "THE", "AND", "OF",
    }
)

KNOWN_MERCHANTS = (
    "UBER", "IFOOD", "RAPPI", "NETFLIX", "SPOTIFY", "AMAZON", "MERCADOLIVRE",
    "MERCADOPAGO", "PICPAY", "NUBANK", "ITAU", "BRADESCO", "SANTANDER",
    "GOOGLE", "APPLE", "MICROSOFT", "STEAM", "PLAYSTATION", "XBOX",
    "SHELL", "IPIRANGA", "BR", "PETROBRAS", "ALE",
    "CARREFOUR", "EXTRA", "PAO", "ACUCAR", "ATACADAO", "ASSAI", "BIG",
    "DROGASIL", "DROGARIA", "PACHECO", "PANVEL", "RAIA",
    "RENNER", "RIACHUELO", "CEA", "MARISA", "HERING",
    "MCDONALDS", "BURGER", "KING", "SUBWAY", "STARBUCKS", "OUTBACK",
    "CLARO", "VIVO", "TIM", "OI", "NET", "SKY",
    "ENEL", "CPFL", "LIGHT", "CEMIG", "COPEL", "SABESP", "SANEPAR",
)

# Prefix matching prefers the longest name (NETFLIXCOM is NETFLIX, not NET).
_KNOWN_BY_LENGTH = tuple(sorted(KNOWN_MERCHANTS, key=len, reverse=True))


class MerchantNormalizationService:
    """Reduces free-text descriptions to merchant keys."""

    def normalize(self, description: str | None) -> str | None:
        """Return the merchant key of ``description``, or None when there is none."""
        if description is None or not description.strip():
            return None

        text = self._strip_accents(description.upper().strip())
        text = self._strip_payment_prefix(text)
        text = _LONG_NUMBER.sub(" ", text)
        text = _SPECIAL_CHARS.sub(" ", text)
        text = self._filter_tokens(text)

        known = self._match_known_merchant(text)
        if known is not None:
            return known

        key = self._compact(self._primary_tokens(text))
        if key is None or len(key) < MIN_KEY_LENGTH:
            return None
        return key

    def _strip_accents(self, text: str) -> str:
        decomposed = unicodedata.normalize("NFD", text)
        return "".join(ch for ch in decomposed if not unicodedata.category(ch).startswith("M"))

    def _strip_payment_prefix(self, text: str) -> str:
        for prefix in PAYMENT_PREFIXES:
            if text.startswith(prefix + "*") or text.startswith(prefix + " "):
                return text[len(prefix) + 1 :].strip()
            if text.startswith(prefix):
                remaining = text[len(prefix) :]
                if remaining and not remaining[0].isalnum():
                    return remaining[1:].strip()
        return text

    def _filter_tokens(self, text: str) -> str:
        kept = []
        for token in _WHITESPACE.split(text.strip()):
            if not token or token in NOISE_TOKENS:
                continue
            if _DIGITS.match(token) or len(token) < 2:
                continue
            kept.append(token)
        return " ".join(kept)

    def _match_known_merchant(self, text: str) -> str | None:
        if not text:
            return None
        for merchant in KNOWN_MERCHANTS:
            if text == merchant or text.startswith(merchant + " "):
                return merchant
        for merchant in _KNOWN_BY_LENGTH:
            if text.startswith(merchant):
                return merchant
        return None

    def _primary_tokens(self, text: str) -> str:
        tokens = [token for token in _WHITESPACE.split(text.strip()) if token]
        return " ".join(tokens[:MAX_PRIMARY_TOKENS])

    def _compact(self, text: str) -> str | None:
        if not text or not text.strip():
            return None
        result = _SHORT_NUMBER.sub(" ", text)
        result = _WHITESPACE.sub(" ", result).strip()
        result = result.replace(" ", "")[:MAX_KEY_LENGTH]
        return result or None


__all__ = ["KNOWN_MERCHANTS", "MerchantNormalizationService", "NOISE_TOKENS"]
