"""
Excel export of bookings using openpyxl
"""
import io
from typing import Iterable

from openpyxl import Workbook
from openpyxl.styles import Font

from app.models.booking import Booking

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"

BOOKING_COLUMNS = [
    "Booking ID", "Customer", "Email", "Phone", "Services", "Categories",
    "Address", "Service Date", "Time", "Status", "Technician", "Technician Phone",
    "Estimated Cost", "Actual Cost", "Rating", "Created At", "Completed At",
]


def _booking_row(booking: Booking) -> list:
    return [
        booking.booking_code,
        booking.name,
        booking.email,
        booking.phone,
        booking.services_text,
        ", ".join(sorted({item.category for item in booking.items})),
        booking.full_address,
        booking.service_date.isoformat() if booking.service_date else "",
        booking.time_slot,
        booking.status.value,
        booking.technician_name or "",
        booking.technician_phone or "",
        float(booking.estimated_cost) if booking.estimated_cost is not None else None,
        float(booking.actual_cost) if booking.actual_cost is not None else None,
        booking.rating,
        booking.created_at.strftime("%Y-%m-%d %H:%M") if booking.created_at else "",
        booking.completed_at.strftime("%Y-%m-%d %H:%M") if booking.completed_at else "",
    ]


def export_bookings_xlsx(bookings: Iterable[Booking]) -> io.BytesIO:
    wb = Workbook()
    ws = wb.active
    ws.title = "Bookings"

    ws.append(BOOKING_COLUMNS)
    for cell in ws[1]:
        cell.font = Font(bold=True)

    for booking in bookings:
        ws.append(_booking_row(booking))

    for column_cells in ws.columns:
        width = max(len(str(cell.value)) if cell.value is not None else 0 for cell in column_cells)
        ws.column_dimensions[column_cells[0].column_letter].width = min(width + 2, 50)

    output = io.BytesIO()
    wb.save(output)
    output.seek(0)
    return output
