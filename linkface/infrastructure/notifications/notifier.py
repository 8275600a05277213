"""
Notificações de nova submissão (email / SMS).

Apenas o serviço "console" está implementado: registra a mensagem no
log. Qualquer outro valor é tratado como não configurado.
"""

import logging

logger = logging.getLogger(__name__)

SUBJECT = "Nova Submissão - Link-Face"


class NotificationService:
    """Envia avisos ao funcionário dono do token. Nunca lança."""

    def __init__(self, email_service: str = "", sms_service: str = ""):
        self._email_service = email_service
        self._sms_service = sms_service

    def send_email(self, to: str, subject: str, message: str) -> bool:
        if self._email_service == "console":
            logger.info("Email enviado (console)", extra={"context": {"to": to, "subject": subject, "message": message}})
            return True
        logger.warning("Serviço de email não configurado", extra={"context": {"email_service": self._email_service}})
        return False

    def send_sms(self, to: str, message: str) -> bool:
        if self._sms_service == "console":
            logger.info("SMS enviado (console)", extra={"context": {"to": to, "message": message}})
            return True
        logger.warning("Serviço de SMS não configurado", extra={"context": {"sms_service": self._sms_service}})
        return False

    def notify_new_submission(
        self,
        client_name: str,
        client_cpf: str,
        employee_email: str | None = None,
        employee_phone: str | None = None,
    ) -> dict:
        message = f"Nova submissão recebida:\nCliente: {client_name}\nCPF: {client_cpf}"
        results = {"email": False, "sms": False}

        if employee_email:
            try:
                results["email"] = self.send_email(employee_email, SUBJECT, message)
            except Exception:
                logger.exception("Erro ao enviar email")
        if employee_phone:
            try:
                results["sms"] = self.send_sms(employee_phone, message)
            except Exception:
                logger.exception("Erro ao enviar SMS")

        return results
