"""FastAPI receiver for LicenseChain webhook deliveries."""

from fastapi import APIRouter, FastAPI, HTTPException, Request
from starlette.concurrency import run_in_threadpool

from licensechain.common.exceptions import ErrorType
from licensechain.common.schemas import ErrorResponse, HealthResponse
from licensechain.webhooks.schemas import WebhookAckResponse
from licensechain.webhooks.signature import SIGNATURE_HEADER
from licensechain.webhooks.verifier import WebhookResult, WebhookVerifier

_STATUS_BY_CODE = {
    ErrorType.INVALID_FORMAT: 400,
    ErrorType.INVALID_INPUT: 401,
    ErrorType.WEBHOOK_VERIFICATION_FAILED: 401,
    ErrorType.HANDLER_ERROR: 500,
}


def _error_status(result: WebhookResult) -> int:
    if result.error is None:
        return 500
    return _STATUS_BY_CODE.get(result.error.code, 500)


def create_webhook_router(verifier: WebhookVerifier, path: str = "/webhooks") -> APIRouter:
    router = APIRouter()

    @router.post(path, response_model=WebhookAckResponse)
    async def receive_webhook(request: Request):
        # Raw bytes: the signature covers the body exactly as sent
        body = await request.body()
        signature = request.headers.get(SIGNATURE_HEADER)
        result = await run_in_threadpool(verifier.process, body, signature)

        if not result.success:
            code = result.error.code.value if result.error else ErrorType.UNKNOWN_ERROR.value
            raise HTTPException(
                status_code=_error_status(result),
                detail=ErrorResponse(
                    error=result.message,
                    code=code,
                    detail=result.stage.value,
                ).model_dump(),
            )

        return WebhookAckResponse(
            success=True,
            event=result.event.value if result.event else None,
            message=result.message,
        )

    return router


def create_webhook_app(verifier: WebhookVerifier, path: str = "/webhooks") -> FastAPI:
    """Standalone app that receives webhooks for a single verifier."""
    app = FastAPI(title="LicenseChain Webhook Receiver")

    @app.get("/health", response_model=HealthResponse)
    async def health():
        return HealthResponse()

    app.include_router(create_webhook_router(verifier, path=path), tags=["webhooks"])
    return app
