from __future__ import annotations

import os

from fpdf import FPDF
from fpdf.enums import XPos, YPos

from inbound.app import config


def _latin1(text) -> str:
    # Polices core FPDF : latin-1 uniquement
    return str(text if text is not None else "").encode("latin-1", "replace").decode("latin-1")


def render_acceptance_certificate(record) -> bytes:
    shipment = record.shipment
    po = shipment.purchase_order if shipment else None
    supplier = po.supplier if po else None

    pdf = FPDF()
    pdf.add_page()
    pdf.set_font("Helvetica", "B", 16)
    pdf.cell(0, 10, "DELIVERY ACCEPTANCE CERTIFICATE", new_x=XPos.LMARGIN, new_y=YPos.NEXT, align="C")
    pdf.ln(6)

    pdf.set_font("Helvetica", size=11)
    header = [
        ("Acceptance", record.id),
        ("Delivery note", shipment.challan_number if shipment else ""),
        ("Purchase order", po.po_number if po else ""),
        ("Vendor", supplier.name if supplier else ""),
        ("Accepted on", record.acceptance_date.strftime("%Y-%m-%d %H:%M") if record.acceptance_date else ""),
        ("Accepted by", record.accepted_by_name),
        ("Designation", record.accepted_by_designation),
        ("Status", record.overall_status.value.upper()),
    ]
    for label, value in header:
        pdf.cell(0, 7, _latin1(f"{label} : {value if value is not None else ''}"), new_x=XPos.LMARGIN, new_y=YPos.NEXT)
    pdf.ln(4)

    widths = (80, 25, 25, 25, 35)
    pdf.set_font("Helvetica", "B", 10)
    for w, title in zip(widths, ("Item", "Delivered", "Accepted", "Rejected", "Status")):
        pdf.cell(w, 8, title, border=1)
    pdf.ln(8)

    pdf.set_font("Helvetica", size=10)
    for it in record.items:
        row = (
            it.description[:45],
            it.delivered_quantity,
            it.accepted_quantity,
            it.rejected_quantity,
            it.item_status.value,
        )
        for w, value in zip(widths, row):
            pdf.cell(w, 8, _latin1(value), border=1)
        pdf.ln(8)

    if record.acceptance_notes:
        pdf.ln(4)
        pdf.multi_cell(0, 6, _latin1(f"Notes : {record.acceptance_notes}"))

    pdf.ln(10)
    pdf.set_font("Helvetica", "I", 9)
    signed = "Signature on file" if record.signature_ref else "No signature captured"
    pdf.cell(0, 6, signed, new_x=XPos.LMARGIN, new_y=YPos.NEXT)
    return bytes(pdf.output())


class FileCertificateGenerator:
    def __init__(self, root: str):
        self.root = root

    def generate(self, record) -> str:
        os.makedirs(self.root, exist_ok=True)
        path = os.path.join(self.root, f"acceptance-{record.id}.pdf")
        with open(path, "wb") as f:
            f.write(render_acceptance_certificate(record))
        return path


def default_certificate_generator() -> FileCertificateGenerator:
    return FileCertificateGenerator(config.CERTIFICATE_DIR)
