"""Serial device setup for smp-testkit.

Contains:
- log_device_info: Log information about a serial device
- open_serial: Open and configure a serial port for the link
"""

import logging
import os

import serial
import serial.tools.list_ports

logger = logging.getLogger(__name__)

# Short read timeout keeps the link event pump responsive
READ_TIMEOUT_S = 0.1
WRITE_TIMEOUT_S = 1.0


def log_device_info(device: str) -> None:
    """Log information about a serial device."""
    real_path = os.path.realpath(device)
    if real_path.startswith("/dev/pts/"):
        logger.info(f"Device: {device} -> {real_path} (pty)")
        return

    matches = [p for p in serial.tools.list_ports.comports() if p.device == device]
    if not matches:
        logger.info(f"Device: {device} (not in port list)")
        return
    if len(matches) > 1:
        raise RuntimeError(f"Multiple ports found for device {device}")

    info = matches[0]
    logger.info(f"Device: {info.device} ({info.description})")
    if info.vid is not None:
        logger.info(f"VID:PID: {info.vid:04x}:{info.pid:04x}")


def open_serial(device: str, baudrate: int, rtscts: bool = False) -> serial.Serial:
    """Open a serial port in 8N1 mode for the link."""
    log_device_info(device)
    ser = serial.Serial(
        port=device,
        baudrate=baudrate,
        bytesize=serial.EIGHTBITS,
        parity=serial.PARITY_NONE,
        stopbits=serial.STOPBITS_ONE,
        xonxoff=False,
        rtscts=rtscts,
        timeout=READ_TIMEOUT_S,
        write_timeout=WRITE_TIMEOUT_S,
    )
    ser.reset_input_buffer()
    ser.reset_output_buffer()
    logger.debug(f"Serial port: baudrate={ser.baudrate}, rtscts={ser.rtscts}")
    return ser
