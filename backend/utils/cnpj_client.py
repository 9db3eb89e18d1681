# backend/utils/cnpj_client.py
import re
import logging
from typing import Optional
from urllib.parse import urljoin

import httpx

from config import settings
from schemas.supplier import CnpjLookup

logger = logging.getLogger(__name__)


def normalize_cnpj(cnpj: str) -> str:
    return re.sub(r"\D", "", cnpj or "")


class CnpjClient:
    """Looks up company registry data to prefill the supplier form."""

    def __init__(self, base_url: Optional[str] = None, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.base_url = base_url or settings.CNPJ_API_URL
        self.transport = transport

    async def lookup(self, cnpj: str) -> Optional[CnpjLookup]:
        digits = normalize_cnpj(cnpj)
        url = urljoin(self.base_url, digits)
        async with httpx.AsyncClient(transport=self.transport, timeout=10.0) as client:
            try:
                response = await client.get(url)
            except httpx.RequestError as e:
                logger.error(f"CNPJ lookup error: {e}")
                raise

        if response.status_code == 404:
            return None
        response.raise_for_status()
        data = response.json()

        street = ", ".join(p for p in (data.get("logradouro"), data.get("numero")) if p)
        return CnpjLookup(
            cnpj=digits,
            name=data.get("razao_social"),
            trade_name=data.get("nome_fantasia") or None,
            email=data.get("email") or None,
            phone=data.get("ddd_telefone_1") or None,
            address=street or None,
            city=data.get("municipio"),
            state=data.get("uf"),
            zip_code=data.get("cep"),
        )


cnpj_client = CnpjClient()


def get_cnpj_client() -> CnpjClient:
    return cnpj_client
