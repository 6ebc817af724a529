from abc import ABC, abstractmethod

from crpt_api.schemas.document import CreateDocumentRequest, CreateDocumentResponse


class AbstractDocumentClient(ABC):
	"""Interface for transports that deliver documents to the remote API."""

	@abstractmethod
	def create_document(self, request: CreateDocumentRequest) -> CreateDocumentResponse:
		"""Send a single create-document request.

		Args:
			request: Document and signature to submit.

		Returns:
			CreateDocumentResponse: Status code and body of the accepted call.

		Raises:
			RemoteCallAppError: If the call fails or the status is not 200/201.
		"""
		...

	def close(self) -> None:
		"""Release transport resources. No-op by default."""
