"""
MJML Email Templates
All transactional emails share the ViraWeb base layout
"""

from html import escape
from typing import Optional

THEME = {
    "primary": "#2563eb",
    "primary_dark": "#1d4ed8",
    "background": "#f8fafc",
    "card_bg": "#ffffff",
    "text_primary": "#0f172a",
    "text_secondary": "#334155",
    "text_muted": "#64748b",
    "border": "#e2e8f0",
    "warning": "#f59e0b",
    "danger": "#ef4444",
}

SITE_NAME = "ViraWeb"
SITE_URL = "https://gds.viraweb.online"


def get_base_template(
    title: str,
    preview_text: str,
    content_sections: str,
    cta_url: Optional[str] = None,
    cta_label: Optional[str] = None,
) -> str:
    """Base MJML template wrapper for all emails"""

    cta_section = ""
    if cta_url and cta_label:
        cta_section = f"""
        <mj-section background-color="#ffffff" padding="0 40px 40px 40px">
          <mj-column>
            <mj-button href="{cta_url}" background-color="{THEME['primary']}" color="#ffffff"
              font-weight="600" border-radius="8px" padding="0" inner-padding="16px 36px">
              {cta_label}
            </mj-button>
          </mj-column>
        </mj-section>
        """

    return f"""
    <mjml>
      <mj-head>
        <mj-title>{title}</mj-title>
        <mj-preview>{preview_text}</mj-preview>
        <mj-attributes>
          <mj-all font-family="-apple-system, BlinkMacSystemFont, 'Segoe UI', Arial, sans-serif" />
          <mj-text font-size="16px" line-height="1.6" color="{THEME['text_secondary']}" />
        </mj-attributes>
      </mj-head>
      <mj-body background-color="{THEME['background']}">
        <mj-section background-color="#ffffff" padding="32px 40px 0 40px">
          <mj-column>
            <mj-text font-size="22px" font-weight="700" color="{THEME['primary']}" padding="0">
              {SITE_NAME}
            </mj-text>
            <mj-divider border-color="{THEME['border']}" border-width="1px" padding="24px 0" />
          </mj-column>
        </mj-section>

        <mj-section background-color="#ffffff" padding="0 40px 32px 40px">
          <mj-column>
            <mj-text font-size="24px" font-weight="600" color="{THEME['text_primary']}" padding="0 0 16px 0">
              {title}
            </mj-text>
            {content_sections}
          </mj-column>
        </mj-section>

        {cta_section}

        <mj-section padding="24px 20px">
          <mj-column>
            <mj-text align="center" font-size="13px" color="#94a3b8" padding="0">
              © {SITE_NAME}. Gestão de clínicas e consultórios.
            </mj-text>
          </mj-column>
        </mj-section>
      </mj-body>
    </mjml>
    """


def _detail_rows(rows: list[tuple[str, str]]) -> str:
    lines = "".join(
        f"<strong>{escape(label)}:</strong> {escape(value)}<br/>" for label, value in rows if value
    )
    return f"""
    <mj-text background-color="{THEME['background']}" padding="16px" css-class="details">
      {lines}
    </mj-text>
    """


def welcome_email_template(user_name: str) -> str:
    content = f"""
    <mj-text>Olá {escape(user_name or '')},</mj-text>
    <mj-text>
      Sua conta no {SITE_NAME} foi criada com sucesso. Agora você pode cadastrar clientes,
      profissionais e organizar toda a agenda da sua clínica em um só lugar.
    </mj-text>
    """
    return get_base_template(
        title="Bem-vindo ao ViraWeb!",
        preview_text="Sua conta foi criada com sucesso",
        content_sections=content,
        cta_url=f"{SITE_URL}/dashboard",
        cta_label="Acessar painel",
    )


def appointment_confirmation_template(
    patient_name: str,
    professional_name: Optional[str],
    appointment_date: str,
    appointment_time: str,
    clinic_name: Optional[str] = None,
) -> str:
    details = _detail_rows(
        [
            ("Data", appointment_date),
            ("Horário", appointment_time),
            ("Profissional", professional_name or ""),
            ("Local", clinic_name or ""),
        ]
    )
    content = f"""
    <mj-text>Olá {escape(patient_name)},</mj-text>
    <mj-text>Seu agendamento foi confirmado.</mj-text>
    {details}
    <mj-text color="{THEME['text_muted']}">
      Caso precise remarcar, entre em contato com antecedência.
    </mj-text>
    """
    return get_base_template(
        title="Agendamento confirmado",
        preview_text=f"Consulta em {appointment_date} às {appointment_time}",
        content_sections=content,
    )


def appointment_reminder_template(
    patient_name: str,
    professional_name: Optional[str],
    appointment_date: str,
    appointment_time: str,
) -> str:
    details = _detail_rows(
        [
            ("Data", appointment_date),
            ("Horário", appointment_time),
            ("Profissional", professional_name or ""),
        ]
    )
    content = f"""
    <mj-text>Olá {escape(patient_name)},</mj-text>
    <mj-text>Lembramos que você tem uma consulta amanhã.</mj-text>
    {details}
    """
    return get_base_template(
        title="Lembrete de consulta",
        preview_text=f"Sua consulta é amanhã às {appointment_time}",
        content_sections=content,
    )


def payment_reminder_template(patient_name: str, due_date: Optional[str]) -> str:
    due_line = f" com vencimento em {escape(due_date)}" if due_date else ""
    content = f"""
    <mj-text>Olá {escape(patient_name)},</mj-text>
    <mj-text color="{THEME['text_primary']}">
      Identificamos um pagamento pendente{due_line}.
    </mj-text>
    <mj-text color="{THEME['text_muted']}">
      Se você já realizou o pagamento, desconsidere esta mensagem.
    </mj-text>
    """
    return get_base_template(
        title="Lembrete de pagamento",
        preview_text="Você possui um pagamento pendente",
        content_sections=content,
    )


def support_ticket_template(
    ticket_id: int, subject: str, message: str, user_email: str, priority: str
) -> str:
    details = _detail_rows(
        [
            ("Chamado", f"#{ticket_id}"),
            ("Assunto", subject),
            ("Prioridade", priority),
            ("Usuário", user_email),
        ]
    )
    content = f"""
    <mj-text>Um novo chamado de suporte foi aberto.</mj-text>
    {details}
    <mj-text>{escape(message)}</mj-text>
    """
    return get_base_template(
        title="Novo chamado de suporte",
        preview_text=f"[{priority}] {subject}",
        content_sections=content,
    )


def support_reply_template(ticket_id: int, subject: str, message: str, user_email: str) -> str:
    details = _detail_rows([("Assunto", subject), ("Usuário", user_email)])
    content = f"""
    <mj-text>Nova mensagem no chamado #{ticket_id}.</mj-text>
    {details}
    <mj-text>{escape(message)}</mj-text>
    """
    return get_base_template(
        title="Nova resposta de suporte",
        preview_text=f"Re: {subject}",
        content_sections=content,
    )
