"""
Makernote (proprietary) tag definitions for Nikon, type 3 (labeled
"Nikon\\0" notes carrying their own TIFF header).

http://www.sno.phy.queensu.ca/~phil/exiftool/TagNames/Nikon.html
"""

from ...field_types import FieldType

TAGS = {
    0x0001: ('NikonMakerNoteVersion', FieldType.ASCII_NO_NUL),
    0x0002: ('NikonISOSetting', ),
    0x0003: ('NikonColorMode', ),
    0x0004: ('NikonQuality', ),
    0x0005: ('NikonWhiteBalance', ),
    0x0006: ('NikonSharpness', ),
    0x0007: ('NikonFocusMode', ),
    0x0008: ('NikonFlashSetting', ),
    0x0009: ('NikonFlashType', ),
    0x000B: ('NikonWhiteBalanceFineTune', ),
    0x000D: ('NikonProgramShift', ),
    0x000E: ('NikonExposureDifference', ),
    0x0011: ('NikonPreviewIFD', ),
    0x0012: ('NikonFlashExposureComp', ),
    0x0013: ('NikonISOSpeedRequested', ),
    0x0016: ('NikonImageBoundary', ),
    0x0018: ('NikonFlashExposureBracketValue', ),
    0x0019: ('NikonExposureBracketValue', ),
    0x001A: ('NikonImageProcessing', ),
    0x001B: ('NikonCropHiSpeed', ),
    0x001D: ('NikonSerialNumber', ),
    0x001E: ('NikonColorSpace', ),
    0x0022: ('NikonActiveDLighting', ),
    0x0080: ('NikonImageAdjustment', ),
    0x0081: ('NikonToneComp', ),
    0x0082: ('NikonAuxiliaryLens', ),
    0x0083: ('NikonLensType', ),
    0x0084: ('NikonLens', ),
    0x0085: ('NikonManualFocusDistance', ),
    0x0086: ('NikonDigitalZoom', ),
    0x0088: ('NikonAFInfo', ),
    0x0089: ('NikonShootingMode', ),
    0x008B: ('NikonLensFStops', ),
    0x008C: ('NikonContrastCurve', ),
    0x0090: ('NikonLightSource', ),
    0x0092: ('NikonHueAdjustment', ),
    0x0095: ('NikonNoiseReduction', ),
    0x00A7: ('NikonShutterCount', ),
    0x00A9: ('NikonImageOptimization', ),
    0x00AA: ('NikonSaturation', ),
    0x00AB: ('NikonVariProgram', ),
    0x00B1: ('NikonHighISONoiseReduction', ),
}

# Sub-IFD pointed at by NikonPreviewIFD
PREVIEW_TAGS = {
    0x0103: ('NikonPreviewCompression', ),
    0x011A: ('NikonPreviewXResolution', ),
    0x011B: ('NikonPreviewYResolution', ),
    0x0128: ('NikonPreviewResolutionUnit', ),
    0x0201: ('NikonPreviewImageStart', ),
    0x0202: ('NikonPreviewImageLength', ),
    0x0213: ('NikonPreviewYCbCrPositioning', ),
}

# Stored relative to the makernote's own TIFF header
PREVIEW_IMAGE_START = 'NikonPreviewImageStart'
