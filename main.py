"""
owl-image
Load an image file, save a copy and report how faithful the copy is.
"""

import sys


def run_cli(args):
    """Load (or generate) an image, save it and reload the copy."""
    from engines.image_file import ImageFile
    from models.image import ImageByte
    from models.save_params import SaveParams
    from utils.logging_config import get_logger, setup_logging
    from utils.metrics import Timer, compute_psnr, max_abs_error
    from utils.test_images import generate_gradient

    setup_logging()
    logger = get_logger("cli")

    if not args or args[0] == '--help':
        print("Usage: python main.py <image_path> [output_path] [quality]")
        print("       python main.py --synthetic [output_path] [quality]")
        return 0

    timer = Timer()
    output_path = args[1] if len(args) > 1 else "copy.jpg"
    quality = int(args[2]) if len(args) > 2 else 100

    if args[0] == '--synthetic':
        print("Generating test image...")
        image = generate_gradient(256, 256)
    else:
        print(f"Loading: {args[0]}")
        image = ImageByte()
        if not timer.measure_load(ImageFile.load, args[0], image):
            logger.error("Fail to open %s", args[0])
            return 1

    print(f"Image:   {image.width}x{image.height} {image.color_space.name}")
    print(f"Stride:  {image.row_stride} bytes")
    print(f"Quality: {quality}")

    if not timer.measure_save(ImageFile.save, output_path, image, SaveParams(quality=quality)):
        logger.error("Fail to save %s", output_path)
        return 1

    copy = ImageByte()
    if not ImageFile.load(output_path, copy):
        logger.error("Fail to reopen %s", output_path)
        return 1

    print("\n=== Results ===")
    if copy.pixels().shape == image.pixels().shape:
        print(f"PSNR:      {compute_psnr(image, copy):.2f} dB")
        print(f"Max error: {max_abs_error(image, copy):.0f}")
    else:
        print(f"Copy is {copy.color_space.name}, original is {image.color_space.name}")
    print(f"Load:      {timer.load_time_ms:.2f} ms")
    print(f"Save:      {timer.save_time_ms:.2f} ms")
    print(f"\nSaved: {output_path}")
    return 0


def main():
    sys.exit(run_cli(sys.argv[1:]))


if __name__ == '__main__':
    main()
