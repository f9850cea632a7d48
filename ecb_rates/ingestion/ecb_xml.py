"""Parse ECB ``eurofxref`` XML documents into :class:`RateRecord` candidates.

The feed nests one ``Cube`` element per date inside an outer ``Cube``::

    <gesmes:Envelope ...>
      <Cube>
        <Cube time="2024-01-02">
          <Cube currency="USD" rate="1.0956"/>
          ...
        </Cube>
      </Cube>
    </gesmes:Envelope>
"""

from __future__ import annotations

import xml.etree.ElementTree as ET
from typing import Iterator

from ecb_rates.exceptions import ParseError
from ecb_rates.ingestion.models import CurrencyQuote, RateRecord

CUBE_TAG = "Cube"


def _local_name(tag: str) -> str:
    return tag.rsplit("}", 1)[-1]


class ECBXMLParser:
    """Decode a reference-rate payload, one candidate per date entry."""

    def iter_records(self, payload: bytes | str) -> Iterator[RateRecord]:
        """Lazily yield candidates.

        Well-formedness is checked before the first candidate is produced; a
        bad attribute inside a later date entry is only reported when the
        iterator reaches it. Use :meth:`parse` to reject the whole payload up
        front.
        """

        outer = self._outer_cube(self._root(payload))
        for entry in outer:
            if _local_name(entry.tag) != CUBE_TAG:
                continue
            yield self._record_from_entry(entry)

    def parse(self, payload: bytes | str) -> list[RateRecord]:
        return list(self.iter_records(payload))

    @staticmethod
    def _root(payload: bytes | str) -> ET.Element:
        if not payload:
            raise ParseError("ECB payload is empty")
        try:
            return ET.fromstring(payload)
        except ET.ParseError as exc:
            raise ParseError(f"ECB payload is not well-formed XML: {exc}") from exc

    @staticmethod
    def _outer_cube(root: ET.Element) -> ET.Element:
        if _local_name(root.tag) == CUBE_TAG:
            return root
        for child in root:
            if _local_name(child.tag) == CUBE_TAG:
                return child
        raise ParseError("ECB payload does not contain a Cube element")

    @staticmethod
    def _record_from_entry(entry: ET.Element) -> RateRecord:
        rate_date = entry.get("time")
        if not rate_date:
            raise ParseError("Cube date entry is missing its 'time' attribute")
        quotes: list[CurrencyQuote] = []
        for item in entry:
            if _local_name(item.tag) != CUBE_TAG:
                continue
            currency = item.get("currency")
            rate_raw = item.get("rate")
            if not currency or rate_raw is None:
                raise ParseError(f"Incomplete currency entry for {rate_date}")
            try:
                rate = float(rate_raw)
            except ValueError as exc:
                raise ParseError(
                    f"Invalid rate {rate_raw!r} for {currency} on {rate_date}"
                ) from exc
            quotes.append(CurrencyQuote(currency=currency.strip(), rate=rate))
        return RateRecord(rate_date=rate_date.strip(), quotes=quotes)


def parse_ecb_xml(payload: bytes | str) -> list[RateRecord]:
    """Convenience wrapper around :meth:`ECBXMLParser.parse`."""

    return ECBXMLParser().parse(payload)


__all__ = ["ECBXMLParser", "parse_ecb_xml"]
