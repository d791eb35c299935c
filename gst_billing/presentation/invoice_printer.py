# gst_billing/presentation/invoice_printer.py

import os
import subprocess
import sys
import tempfile
from typing import List, Optional

from PyQt5.QtPrintSupport import QPrinter, QPrintDialog
from PyQt5.QtWidgets import QDialog

from gst_billing.business_logic.entities.invoice_entity import InvoiceEntity
from .invoice_renderer import InvoiceRenderer

import logging
logger = logging.getLogger(__name__)


def spool_command(pdf_path: str, printer_name: str = "", copies: int = 1,
                  platform: str = sys.platform) -> Optional[List[str]]:
    """
    CUPS `lp` arguments that queue the PDF on the chosen printer.
    Returns None on Windows, where the shell's print verb is used instead.
    """
    if platform.startswith("win"):
        return None
    command = ["lp"]
    if printer_name:
        command += ["-d", printer_name]
    if copies > 1:
        command += ["-n", str(copies)]
    command.append(pdf_path)
    return command


def send_pdf_to_printer(pdf_path: str, printer_name: str = "", copies: int = 1,
                        platform: str = sys.platform, run=subprocess.run) -> None:
    """Hands a finished PDF to the OS print queue. `lp` copies the file before it returns."""
    command = spool_command(pdf_path, printer_name, copies, platform)
    if command is None:
        # default printer; the shell reads the file after this returns
        os.startfile(pdf_path, "print")
        return
    logger.info(f"Spooling {pdf_path}: {' '.join(command)}")
    run(command, check=True, capture_output=True)


def print_invoice(parent, renderer: InvoiceRenderer, invoice: InvoiceEntity) -> bool:
    """Asks for a printer, then prints the same weasyprint PDF that Download PDF saves."""
    printer = QPrinter(QPrinter.HighResolution)
    printer.setPageSize(QPrinter.A4)
    printer.setDocName(InvoiceRenderer.pdf_file_name(invoice))
    dialog = QPrintDialog(printer, parent)
    if dialog.exec_() != QDialog.Accepted:
        return False

    with tempfile.NamedTemporaryFile(prefix=f"invoice_{invoice.id}_", suffix=".pdf", delete=False) as handle:
        handle.write(renderer.pdf_bytes(invoice))
        pdf_path = handle.name
    try:
        send_pdf_to_printer(pdf_path, printer.printerName(), printer.copyCount())
    finally:
        # the Windows print verb reads the file later, so it stays in the temp dir there
        if not sys.platform.startswith("win"):
            os.remove(pdf_path)
    logger.info(f"Bill {invoice.id} sent to printer '{printer.printerName()}'.")
    return True
