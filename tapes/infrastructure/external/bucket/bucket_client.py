"""
Cliente del bucket S3-compatible (DigitalOcean Spaces) con boto3.

Implementa ImageSource: lista todos los object keys y lee la metadata
custom (x-amz-meta-*) de cada imagen con un HEAD.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError
from loguru import logger


@dataclass(frozen=True)
class BucketCredentials:
    access_key_id: str
    secret_key: str


class BucketError(RuntimeError):
    """Error de integración con el bucket."""


def normalize_metadata_key(key: str) -> str:
    """
    S3 devuelve los nombres de metadata en minusculas ("width"); las
    imagenes se suben con "Width", asi que normalizamos a capitalizado.
    """
    return key[:1].upper() + key[1:].lower()


class BucketClient:
    """
    Cliente del bucket de imagenes.

    Args:
        bucket_name: Nombre del bucket
        endpoint: Origen del endpoint, sin esquema (p.ej. "sfo2.digitaloceanspaces.com")
        region: Region del bucket
        credentials: Access key + secret
        client: Cliente boto3 ya construido (tests)
    """

    def __init__(
        self,
        bucket_name: str,
        endpoint: str,
        region: str,
        credentials: Optional[BucketCredentials] = None,
        *,
        client: Any = None,
    ) -> None:
        self.bucket_name = bucket_name
        self.endpoint = endpoint
        self.region = region

        if client is None:
            client_kwargs: Dict[str, Any] = {
                "service_name": "s3",
                "region_name": region,
                "endpoint_url": f"https://{endpoint}",
                "config": Config(signature_version="s3v4", s3={"addressing_style": "virtual"}),
            }
            if credentials:
                client_kwargs["aws_access_key_id"] = credentials.access_key_id
                client_kwargs["aws_secret_access_key"] = credentials.secret_key
            client = boto3.client(**client_kwargs)
        self.client = client

        logger.info(f"Bucket client inicializado: {bucket_name} @ {endpoint} ({region})")

    @property
    def image_host_url(self) -> str:
        """URL publica desde donde se sirven los objetos del bucket."""
        return f"https://{self.bucket_name}.{self.endpoint}"

    def list_filenames(self) -> List[str]:
        """
        Lista todos los keys del bucket, recorriendo todas las paginas.

        Raises:
            BucketError: si falla cualquier pedido de listado.
        """
        filenames: List[str] = []
        try:
            paginator = self.client.get_paginator("list_objects_v2")
            for page in paginator.paginate(Bucket=self.bucket_name):
                for obj in page.get("Contents", []):
                    filenames.append(obj["Key"])
        except (ClientError, BotoCoreError) as e:
            raise BucketError(str(e)) from e

        logger.info(f"Bucket {self.bucket_name}: {len(filenames)} objetos listados")
        return filenames

    def get_metadata(self, filename: str) -> Dict[str, str]:
        """
        HEAD del objeto; retorna su metadata custom con keys capitalizadas.

        Raises:
            BucketError: si falla el HEAD (incluye objeto inexistente).
        """
        try:
            response = self.client.head_object(Bucket=self.bucket_name, Key=filename)
        except (ClientError, BotoCoreError) as e:
            raise BucketError(str(e)) from e

        logger.debug(f"Metadata obtenida para {filename}")
        return {
            normalize_metadata_key(key): value
            for key, value in (response.get("Metadata") or {}).items()
        }
