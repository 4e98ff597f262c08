# dc_certificates/routers/chains.py
# Chain build endpoints: JSON bundle and encrypted ZIP download

import asyncio
import datetime
import logging
from typing import Tuple
from fastapi import APIRouter, HTTPException, Response
from fastapi.concurrency import run_in_threadpool

from ..config import settings
from ..certificates.exceptions import CertificateChainError, InputError
from ..certificates.models.certificate import ChainBuildResponse, ChainRequest, result_to_api_model
from ..certificates.storage.key_store import KeyStore
from ..certificates.subject import validate_domain
from ..services.chain_builder import ChainBuilder, ChainBuildResult
from ..services.secure_zip_creator import SecureZipCreatorError, secure_zip_creator

logger = logging.getLogger(__name__)
router = APIRouter(prefix=f"{settings.API_PREFIX}/chains", tags=["chains"])

def _validated_domain(request: ChainRequest) -> str:
    try:
        return validate_domain(request.domain)
    except InputError as e:
        raise HTTPException(status_code=422, detail=e.message)

async def _run_with_deadline(func, *args):
    """Run a blocking build in the threadpool under BUILD_TIMEOUT_SECONDS"""
    try:
        return await asyncio.wait_for(run_in_threadpool(func, *args), timeout=settings.BUILD_TIMEOUT_SECONDS)
    except asyncio.TimeoutError:
        logger.error(f"Chain build exceeded {settings.BUILD_TIMEOUT_SECONDS}s deadline")
        raise HTTPException(status_code=504, detail="Chain build timed out")
    except CertificateChainError as e:
        logger.error(f"Chain build failed: {e}")
        raise HTTPException(status_code=500, detail=f"Chain build failed: {e}")

def _build_in_memory(domain: str) -> ChainBuildResult:
    return ChainBuilder().build(domain)

def _build_archive(domain: str) -> Tuple[bytes, str, bool]:
    """Build into a temporary key store and pack every artifact, keys included"""
    with KeyStore.temporary(domain) as key_store:
        result = ChainBuilder().build(domain, key_store=key_store)
        files = key_store.collect()

    zip_data, password = secure_zip_creator.create_protected_zip(files)
    return zip_data, password, result.verified

@router.post("", response_model=ChainBuildResponse)
async def create_chain(request: ChainRequest):
    """Generate a SMPTE 430-2 hierarchy and return certificates, chains and report"""
    domain = _validated_domain(request)
    logger.info(f"Chain build requested for {domain}")

    result = await _run_with_deadline(_build_in_memory, domain)

    logger.info(f"Chain build for {domain} finished, verified: {result.verified}")
    return result_to_api_model(result, generated=datetime.datetime.now().isoformat())

@router.post("/download")
async def download_chain(request: ChainRequest):
    """
    Generate a hierarchy and return every artifact (keys, certificates, CSRs,
    configs, chains, report) as an AES-256 encrypted ZIP. The password is
    returned in the X-Zip-Password header.
    """
    domain = _validated_domain(request)
    logger.info(f"Chain archive requested for {domain}")

    try:
        zip_data, zip_password, verified = await _run_with_deadline(_build_archive, domain)
    except SecureZipCreatorError as e:
        logger.error(f"Archive creation failed for {domain}: {e}")
        raise HTTPException(status_code=500, detail="Failed to create archive")

    filename = f"{domain}-dc-certificate-chain-{datetime.datetime.now().strftime('%Y%m%d-%H%M%S')}.zip"
    return Response(
        content=zip_data,
        media_type="application/zip",
        headers={
            "Content-Disposition": f"attachment; filename={filename}",
            "X-Zip-Password": zip_password,
            "X-Chain-Verified": "true" if verified else "false",
            "Content-Length": str(len(zip_data))
        }
    )
