"""Catalog of prebuilt workflows: descriptive metadata and email defaults.

Handler defaults (subject/body) come from here; tenants override them through
stored configs.
"""

from opsflow.domain.entities.workflow import (
    EmailDefaults,
    TemplateVariable,
    WorkflowDefinition,
)
from opsflow.domain.exceptions import UnknownWorkflowException
from opsflow.shared.enums import WorkflowKey


def _var(token: str, label: str, description: str) -> TemplateVariable:
    return TemplateVariable(token=token, label=label, description=description)


_COMPANY_NAME = _var("companyName", "Company name", "Your organization name")

LEAD_TO_CLIENT_EMAIL_BODY = "\n".join(
    [
        "Hi {{clientName}},",
        "",
        "Thanks for choosing {{companyName}}. Your dedicated team just converted your account "
        "and prepared everything you need to get started.",
        "",
        "Here is what happens next:",
        "- Kickoff tasks are already queued in your onboarding workspace.",
        "- You can access the shared folder here: {{projectFolderLink}}.",
        "- Your point of contact is {{accountManagerName}} ({{accountManagerEmail}}).",
        "",
        "If you have any questions, simply reply to this email and we will help right away.",
        "",
        "Looking forward to working together!",
        "{{accountManagerName}}",
        "{{companyName}} onboarding team",
    ]
)

CLIENT_ONBOARDING_EMAIL_BODY = "\n".join(
    [
        "Hi {{clientName}},",
        "",
        "We are excited to kick off your onboarding journey. To keep everything on track "
        "we prepared three quick actions for you:",
        "1. Review the contract draft: {{contractLink}}.",
        "2. Upload any kickoff documents at {{documentPortalLink}}.",
        "3. Confirm your preferred payment method using {{paymentSetupLink}}.",
        "",
        "Your onboarding lead {{onboardingOwnerName}} will follow up within one business day. "
        "Feel free to reply to this message if anything comes up.",
        "",
        "Welcome aboard!",
        "{{onboardingOwnerName}}",
        "{{companyName}}",
    ]
)

PROJECT_LIFECYCLE_EMAIL_BODY = "\n".join(
    [
        "Hello {{clientName}},",
        "",
        "We just opened your project board and assigned the delivery team. "
        "You can follow progress at {{projectBoardLink}}.",
        "",
        "Status overview:",
        "- Owner: {{projectOwnerName}}",
        "- Current stage: {{projectStage}}",
        "- Upcoming milestone: {{nextMilestoneName}} due {{nextMilestoneDueDate}}",
        "",
        "We will keep you updated as soon as tasks move to Done and when the invoice is ready.",
        "",
        "Thank you,",
        "{{projectOwnerName}}",
        "{{companyName}} projects team",
    ]
)

INVOICE_TRACKING_EMAIL_BODY = "\n".join(
    [
        "Hi {{clientName}},",
        "",
        "Great news: your project {{projectName}} wrapped up and the invoice "
        "{{invoiceNumber}} is ready.",
        "",
        "Amount due: {{invoiceAmount}}",
        "Due date: {{invoiceDueDate}}",
        "Pay online: {{invoicePaymentLink}}",
        "",
        "We will automatically follow up if payment is still pending after {{reminderDays}} days. "
        "Marking the invoice as paid will close out the workflow.",
        "",
        "Thank you for your partnership!",
        "{{financeOwnerName}}",
        "{{companyName}} finance team",
    ]
)

CONTRACT_RENEWAL_EMAIL_BODY = "\n".join(
    [
        "Hello {{clientName}},",
        "",
        "Your current agreement for {{serviceName}} renews on {{renewalDate}}. "
        "To keep coverage active we prepared everything in advance.",
        "",
        "Next steps:",
        "- Review the renewal summary: {{renewalSummaryLink}}.",
        "- Confirm any scope changes with {{accountManagerName}}.",
        "- Review the draft invoice here: {{invoiceDraftLink}}.",
        "",
        "Please let us know if you would like to adjust anything. Otherwise, "
        "we will send the final invoice on {{invoiceSendDate}}.",
        "",
        "Appreciate your continued trust,",
        "{{accountManagerName}}",
        "{{companyName}}",
    ]
)

INTERNAL_HEALTH_EMAIL_BODY = "\n".join(
    [
        "Hi team,",
        "",
        "Here is your weekly operations snapshot:",
        "",
        "- Open projects: {{currentProjectCount}}",
        "- Projects at risk: {{projectsAtRiskCount}}",
        "- Overdue invoices: {{overdueInvoiceCount}}",
        "- Active clients: {{activeClientCount}}",
        "",
        "Highlights:",
        "{{topInsightLineOne}}",
        "{{topInsightLineTwo}}",
        "",
        "Focus for next week:",
        "- {{focusAreaOne}}",
        "- {{focusAreaTwo}}",
        "",
        "Keep up the great work!",
        "{{operationsLeadName}}",
    ]
)

PREBUILT_WORKFLOWS: tuple[WorkflowDefinition, ...] = (
    WorkflowDefinition(
        key=WorkflowKey.LEAD_TO_CLIENT,
        title="Lead -> Client Conversion",
        short_description=(
            "One-click conversion that creates the client record, onboarding project, "
            "and updates the pipeline."
        ),
        overview=(
            "Automatically convert a qualified lead into a client, create the onboarding "
            "project folder, and update CRM pipeline stages without manual handoffs."
        ),
        trigger="When a new CRM lead moves into the Qualified stage.",
        actions=(
            "Create or update the client record in CRM",
            "Spin up a default project workspace with tasks",
            "Trigger the onboarding workflow and notifications",
            "Move the lead into the Client stage with status tracking",
        ),
        category="CRM",
        module_dependencies=("CRM", "Projects"),
        highlight=(
            "Reduce lead-to-client handoff time and keep sales to delivery transitions consistent."
        ),
        email_defaults=EmailDefaults(
            subject="Welcome to {{companyName}} - your onboarding is ready",
            body=LEAD_TO_CLIENT_EMAIL_BODY,
            variables=(
                _var("clientName", "Client name", "Primary contact full name"),
                _COMPANY_NAME,
                _var("projectFolderLink", "Project folder link", "Shared folder or drive link for the client"),
                _var("accountManagerName", "Account manager name", "Primary owner of the client relationship"),
                _var("accountManagerEmail", "Account manager email", "Contact email for follow-up"),
            ),
        ),
    ),
    WorkflowDefinition(
        key=WorkflowKey.CLIENT_ONBOARDING,
        title="Client Onboarding",
        short_description=(
            "Assign kickoff tasks, generate the contract template, and notify the team "
            "when a client is added."
        ),
        overview=(
            "Standardize the onboarding journey every time a new client record is created. "
            "Contracts, tasks, and notifications run instantly so the team stays aligned."
        ),
        trigger="When a client record is created in CRM.",
        actions=(
            "Generate the contract template and attach it to the client",
            "Assign kickoff tasks like document upload and payment setup",
            "Send an internal notification to the onboarding owner",
        ),
        category="CRM",
        module_dependencies=("CRM", "Projects"),
        highlight="Give every client a polished onboarding experience with zero manual steps.",
        email_defaults=EmailDefaults(
            subject="Welcome aboard - onboarding steps inside",
            body=CLIENT_ONBOARDING_EMAIL_BODY,
            variables=(
                _var("clientName", "Client name", "Primary contact full name"),
                _var("contractLink", "Contract link", "Generated contract template URL"),
                _var("documentPortalLink", "Document portal link", "Upload folder or portal URL"),
                _var("paymentSetupLink", "Payment setup link", "Payment onboarding page"),
                _var("onboardingOwnerName", "Onboarding owner name", "Team member owning onboarding"),
                _COMPANY_NAME,
            ),
        ),
    ),
    WorkflowDefinition(
        key=WorkflowKey.PROJECT_LIFECYCLE,
        title="Project Lifecycle",
        short_description=(
            "Launch the project board, assign the team, and prep invoicing once work is "
            "marked complete."
        ),
        overview=(
            "Keep every delivery consistent by generating the project structure, assigning "
            "the team, and queuing invoicing the moment work finishes."
        ),
        trigger="When a new project is created.",
        actions=(
            "Create the default task board (To Do -> Doing -> Done)",
            "Assign the owner and default delivery team",
            "Generate the invoice when the project reaches Done",
        ),
        category="Projects",
        module_dependencies=("Projects", "Finance"),
        highlight="Make kickoff-to-invoice seamless with a ready-made lifecycle.",
        email_defaults=EmailDefaults(
            subject="Project {{projectName}} is in motion",
            body=PROJECT_LIFECYCLE_EMAIL_BODY,
            variables=(
                _var("clientName", "Client name", "Client receiving the update"),
                _var("projectBoardLink", "Project board link", "Link to the project board"),
                _var("projectOwnerName", "Project owner name", "Assigned owner"),
                _var("projectStage", "Project stage", "Current stage label"),
                _var("nextMilestoneName", "Next milestone", "Name of the upcoming milestone"),
                _var("nextMilestoneDueDate", "Next milestone due date", "Due date text"),
                _COMPANY_NAME,
            ),
        ),
    ),
    WorkflowDefinition(
        key=WorkflowKey.INVOICE_TRACKING,
        title="Invoice & Payment Tracking",
        short_description=(
            "Send the invoice when projects close and follow up automatically until payment arrives."
        ),
        overview=(
            "Automate invoicing for completed projects, monitor overdue balances, and gently "
            "nudge clients until payments post."
        ),
        trigger="When a project is marked as completed.",
        actions=(
            "Create the invoice using the project total",
            "Send the initial payment email to the client",
            "Schedule follow-up reminders after X days if unpaid",
            "Close the workflow when the invoice is marked paid",
        ),
        category="Finance",
        module_dependencies=("Finance", "Projects"),
        highlight="Never let an invoice slip through the cracks again.",
        email_defaults=EmailDefaults(
            subject="Invoice {{invoiceNumber}} for {{projectName}}",
            body=INVOICE_TRACKING_EMAIL_BODY,
            variables=(
                _var("clientName", "Client name", "Billing contact name"),
                _var("projectName", "Project name", "Completed project name"),
                _var("invoiceNumber", "Invoice number", "Reference number"),
                _var("invoiceAmount", "Invoice amount", "Amount due"),
                _var("invoiceDueDate", "Invoice due date", "Due date text"),
                _var("invoicePaymentLink", "Payment link", "URL for payment"),
                _var("reminderDays", "Reminder days", "Number of days before reminder"),
                _var("financeOwnerName", "Finance owner name", "Team member sending the invoice"),
                _COMPANY_NAME,
            ),
        ),
    ),
    WorkflowDefinition(
        key=WorkflowKey.CONTRACT_RENEWAL,
        title="Contract Renewal / Retainer",
        short_description=(
            "Alert the team ahead of renewals, email the client, and queue the draft invoice."
        ),
        overview=(
            "Stay ahead of renewal deadlines by automatically alerting owners, preparing client "
            "communication, and drafting renewal invoices."
        ),
        trigger="15 days before a renewal date for a retained client.",
        actions=(
            "Alert the account manager before the renewal window",
            "Send the renewal email with summary and invoice draft",
            "Update CRM stage once the renewal is confirmed",
        ),
        category="Finance",
        module_dependencies=("Finance", "CRM"),
        highlight="Never miss a renewal commitment and keep revenue predictable.",
        email_defaults=EmailDefaults(
            subject="Renewal coming up on {{renewalDate}}",
            body=CONTRACT_RENEWAL_EMAIL_BODY,
            variables=(
                _var("clientName", "Client name", "Retained client contact"),
                _var("serviceName", "Service name", "Service or retainer name"),
                _var("renewalDate", "Renewal date", "Date of renewal"),
                _var("renewalSummaryLink", "Renewal summary link", "Link to summary document"),
                _var("accountManagerName", "Account manager name", "Owner of the relationship"),
                _var("invoiceDraftLink", "Invoice draft link", "Draft invoice URL"),
                _var("invoiceSendDate", "Invoice send date", "Planned send date"),
                _COMPANY_NAME,
            ),
        ),
    ),
    WorkflowDefinition(
        key=WorkflowKey.INTERNAL_HEALTH,
        title="Internal Health Dashboard",
        short_description=(
            "Send a Friday summary of workload, revenue blockers, and client counts to the "
            "leadership team."
        ),
        overview=(
            "Give leadership a consistent weekly briefing on projects, invoices, and client "
            "health without manual reporting."
        ),
        trigger="Every Friday at 9am organization timezone.",
        actions=(
            "Aggregate project, client, and invoice stats",
            "Generate the summary message with highlights",
            "Email the distribution list with key focus areas",
        ),
        category="Operations",
        module_dependencies=("Projects", "Finance", "CRM"),
        highlight="Give leadership proactive visibility without logging into dashboards.",
        email_defaults=EmailDefaults(
            subject="Weekly operations snapshot",
            body=INTERNAL_HEALTH_EMAIL_BODY,
            variables=(
                _var("currentProjectCount", "Current project count", "Number of open projects"),
                _var("projectsAtRiskCount", "Projects at risk", "Projects flagged as at risk"),
                _var("overdueInvoiceCount", "Overdue invoice count", "Invoices beyond due date"),
                _var("activeClientCount", "Active client count", "Active client total"),
                _var("topInsightLineOne", "Top insight line one", "First highlight line"),
                _var("topInsightLineTwo", "Top insight line two", "Second highlight line"),
                _var("focusAreaOne", "Focus area one", "First priority for next week"),
                _var("focusAreaTwo", "Focus area two", "Second priority for next week"),
                _var("operationsLeadName", "Operations lead name", "Sender name"),
            ),
        ),
    ),
)

PREBUILT_WORKFLOW_KEYS: tuple[str, ...] = tuple(d.key.value for d in PREBUILT_WORKFLOWS)

_DEFINITIONS_BY_KEY: dict[str, WorkflowDefinition] = {d.key.value: d for d in PREBUILT_WORKFLOWS}


def find_workflow_definition(workflow_key: str) -> WorkflowDefinition | None:
    """Return the catalog entry for workflow_key, or None."""
    return _DEFINITIONS_BY_KEY.get(workflow_key)


def get_workflow_definition(workflow_key: str) -> WorkflowDefinition:
    """Return the catalog entry for workflow_key. Raises UnknownWorkflowException."""
    definition = find_workflow_definition(workflow_key)
    if definition is None:
        raise UnknownWorkflowException(workflow_key)
    return definition
