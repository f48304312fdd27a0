"""Write acknowledgements returned by the create/update/delete endpoints."""

from pydantic import BaseModel


class InsertResultResponse(BaseModel):
    insertedId: int


class UpdateResultResponse(BaseModel):
    matchedCount: int
    modifiedCount: int


class DeleteResultResponse(BaseModel):
    deletedCount: int


class PaymentInsertResultResponse(BaseModel):
    acknowledged: bool
    insertedId: int | None = None
    existingId: int | None = None


class CartCleanupResultResponse(BaseModel):
    acknowledged: bool
    deletedCount: int
    error: str | None = None


class SettlementResponse(BaseModel):
    paymentResult: PaymentInsertResultResponse
    deleteResult: CartCleanupResultResponse
