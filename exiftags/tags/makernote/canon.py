"""
Makernote (proprietary) tag definitions for Canon.

http://www.sno.phy.queensu.ca/~phil/exiftool/TagNames/Canon.html
"""

TAGS = {
    0x0001: ('CanonCameraSettings', ),
    0x0002: ('CanonFocalLength', ),
    0x0004: ('CanonShotInfo', ),
    0x0006: ('CanonImageType', ),
    0x0007: ('CanonFirmwareVersion', ),
    0x0008: ('CanonImageNumber', ),
    0x0009: ('CanonOwnerName', ),
    0x000C: ('CanonSerialNumber', ),
    0x000D: ('CanonCameraInfo', ),
    0x000E: ('CanonFileLength', ),
    0x0010: ('CanonModelID', ),
    0x0012: ('CanonAFInfo', ),
    0x0015: ('CanonSerialNumberFormat', ),
    0x001C: ('CanonDateStampMode', ),
    0x001E: ('CanonFirmwareRevision', ),
    0x0026: ('CanonAFInfo2', ),
    0x0028: ('CanonImageUniqueID', ),
    0x0095: ('CanonLensModel', ),
    0x0096: ('CanonInternalSerialNumber', ),
    0x00A0: ('CanonProcessingInfo', ),
    0x00AA: ('CanonMeasuredColor', ),
    0x00B4: ('CanonColorSpace', ),
    0x00E0: ('CanonSensorInfo', ),
}
